"""Gymnasium environments for Block Drop RL."""

from __future__ import annotations

from gymnasium.envs.registration import register

# Register default falling-block environment
register(
    id="BlockDrop-10x20-v0",
    entry_point="block_drop_rl.env.block_drop_env:BlockDropEnv",
)

__all__ = ["BlockDrop-10x20-v0"]
