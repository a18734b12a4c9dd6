"""Shared test fixtures for the chess duel client."""

from __future__ import annotations

import pytest

from src.networking.peer import MockMovePeer
from src.networking.protocol import Agreement, Color
from src.simulation.rules import RuleEngine


@pytest.fixture
def rules() -> RuleEngine:
    return RuleEngine()


@pytest.fixture
def mock_peer() -> MockMovePeer:
    """A lone mock peer; sent records land in sent_moves / sent_acks."""
    return MockMovePeer()


@pytest.fixture
def white_agreement() -> Agreement:
    return Agreement(local_color=Color.WHITE, local_name="alice", peer_name="bob")


@pytest.fixture
def black_agreement() -> Agreement:
    return Agreement(local_color=Color.BLACK, local_name="bob", peer_name="alice")
