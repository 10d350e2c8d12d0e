"""
Ledger network collaborator interfaces.

The gateway depends only on this call shape: connect with a profile and a
wallet identity, pick a network (channel) and a contract (chaincode), submit
a transaction, disconnect.
"""

from typing import Any, Protocol


class Contract(Protocol):
    def submit_transaction(self, function_name: str, *args: str) -> bytes:
        ...


class Network(Protocol):
    def get_contract(self, chaincode_name: str) -> Contract:
        ...


class Gateway(Protocol):
    def get_network(self, channel_name: str) -> Network:
        ...

    def disconnect(self) -> None:
        ...


class NetworkConnector(Protocol):
    """Opens gateway connections to the ledger network"""

    def connect(self, profile: dict[str, Any], options: dict[str, Any]) -> Gateway:
        """
        Open a gateway connection.

        Args:
            profile: Connection profile document
            options: ``{"wallet": Wallet, "identity": label, "discovery": {...}}``
        """
        ...
