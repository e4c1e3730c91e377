"""Deterministic cross-chain xERC20 token and lockbox factory.

- Predict token and lockbox addresses with CREATE2 before deploying them

- Run the factory workflows against an in-process chain with EVM transaction semantics

- Preflight deployments against live chains using Web3.py
"""
