"""
Contract registry: which deployment and protocol generation an address is.

Several generations of the governance contracts can be live at once. Logs
are only trusted when their emitting address is registered for the version
and kind of the decoder that parsed them.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from ..core.address import Address
from ..core.errors import ConfigError

V1 = "v1"
V2 = "v2"

# Newest first.
VERSIONS: Tuple[str, ...] = (V2, V1)

VOTING = "voting"
KEYS_MANAGER = "keys_manager"
VALIDATOR_METADATA = "validator_metadata"
NETWORK_CONSENSUS = "network_consensus"

DESCRIPTOR_KEYS = {
    "VOTING_TO_CHANGE_KEYS_ADDRESS": VOTING,
    "KEYS_MANAGER_ADDRESS": KEYS_MANAGER,
    "METADATA_ADDRESS": VALIDATOR_METADATA,
    "POA_NETWORK_CONSENSUS_ADDRESS": NETWORK_CONSENSUS,
}


@dataclass(frozen=True)
class ContractInfo:
    version: str
    kind: str


class ContractRegistry:
    """
    Address -> {version, kind} mapping.

    The same address may be registered under more than one version (a
    contract that survived a protocol upgrade); lookup() then reports the
    newest registration.
    """

    def __init__(self) -> None:
        self._entries: Dict[Address, List[ContractInfo]] = {}

    def register(self, address: Address, version: str, kind: str) -> None:
        if version not in VERSIONS:
            raise ConfigError(f"unknown protocol version: {version!r}")
        if kind not in DESCRIPTOR_KEYS.values():
            raise ConfigError(f"unknown contract kind: {kind!r}")
        infos = self._entries.setdefault(address, [])
        info = ContractInfo(version, kind)
        if info not in infos:
            infos.append(info)
            infos.sort(key=lambda i: VERSIONS.index(i.version))

    def lookup(self, address: Address) -> Optional[ContractInfo]:
        infos = self._entries.get(address)
        return infos[0] if infos else None

    def is_registered(self, address: Address, version: str, kind: str) -> bool:
        return ContractInfo(version, kind) in self._entries.get(address, ())

    def addresses(self, kind: Optional[str] = None, version: Optional[str] = None) -> List[Address]:
        """Registered addresses, optionally restricted, in sorted order."""
        out = []
        for address, infos in self._entries.items():
            if any((kind is None or i.kind == kind) and (version is None or i.version == version) for i in infos):
                out.append(address)
        return sorted(out)

    def newest(self, kind: str) -> Address:
        """
        Address of the newest registered contract of a kind.

        Raises:
            ConfigError: If no contract of that kind is registered
        """
        for version in VERSIONS:
            found = self.addresses(kind=kind, version=version)
            if found:
                return found[0]
        raise ConfigError(f"no {kind} contract address configured")

    def __iter__(self) -> Iterator[Tuple[Address, ContractInfo]]:
        for address in sorted(self._entries):
            for info in self._entries[address]:
                yield address, info

    def __len__(self) -> int:
        return len(self._entries)

    @classmethod
    def from_descriptor(cls, data: Mapping[str, Any]) -> "ContractRegistry":
        """
        Build a registry from the contracts descriptor.

        Format:
            {"v2": {"VOTING_TO_CHANGE_KEYS_ADDRESS": "0x...", ...}, "v1": {...}}

        Raises:
            ConfigError: On unknown versions/keys or malformed addresses
        """
        if not isinstance(data, Mapping):
            raise ConfigError("contracts descriptor must be a JSON object")
        registry = cls()
        for version, entries in data.items():
            if version not in VERSIONS:
                raise ConfigError(f"unknown protocol version in descriptor: {version!r}")
            if not isinstance(entries, Mapping):
                raise ConfigError(f"descriptor entry for {version} must be an object")
            for key, value in entries.items():
                kind = DESCRIPTOR_KEYS.get(key)
                if kind is None:
                    raise ConfigError(f"unknown contract key in descriptor: {version}.{key}")
                if value is None:
                    continue
                try:
                    address = Address.parse(str(value))
                except ValueError as e:
                    raise ConfigError(f"{version}.{key}: {e}") from e
                registry.register(address, version, kind)
        if not len(registry):
            raise ConfigError("contracts descriptor lists no addresses")
        return registry

    @classmethod
    def from_json(cls, path: str) -> "ContractRegistry":
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise ConfigError(f"contracts file not found: {path}") from e
        except (OSError, ValueError) as e:
            raise ConfigError(f"cannot read contracts file {path}: {e}") from e
        return cls.from_descriptor(data)
