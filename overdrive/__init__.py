"""
Overdrive - Turn-based Racing Card Game Engine

A deterministic, server-authoritative engine for a multiplayer racing game
played with personal decks of movement cards. The package provides:
- The race engine (cards, heat, corners, collisions, turn state machine)
- Rooms for gathering players and serializing their actions
- An HTTP API and CLI around the engine
"""

__version__ = "0.1.0"
