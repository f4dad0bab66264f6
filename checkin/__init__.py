"""
Check-in protocol for the Super Intent mission site.

Submodules:
    models: Pydantic models for API payloads with explicit defaults.
    siwe: EIP-4361 sign-in message rendering.
    auth: Nonce / sign / submit / verify handshake.
    workflow: ``CheckInWorkflow`` state machine and ``WalletResult``.
"""
