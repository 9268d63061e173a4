#!/usr/bin/env python3
"""
Configuration Manager for the sACN sender

Handles loading and saving of sender configuration to JSON files. The source
CID is generated once and written back, so a source keeps the same identity
across runs.
"""

import json
import os
import uuid
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Callable, Dict, List, Optional, Union

from .addressing import interface_address
from .errors import AddressFamilyError
from .packet_builder import (
    DEFAULT_PRIORITY,
    MAX_PRIORITY,
    SACN_PORT,
    SourceIdentity,
)
from .sender import SACNSender

DEFAULT_CONFIG_FILE = "sacn_tx_config.json"


@dataclass
class SenderConfig:
    """Settings needed to build a sender."""
    cid: str = field(default_factory=lambda: str(uuid.uuid4()))
    source_name: str = "sacn-tx"
    port: int = SACN_PORT
    priority: int = DEFAULT_PRIORITY
    multicast_interface: Optional[Union[str, int]] = None
    unicast_host: Optional[str] = None
    fps: int = 30

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SenderConfig':
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def validate(self) -> List[str]:
        """
        Validate configuration values.

        Returns:
            List[str]: Problems found; empty when the configuration is usable
        """
        problems = []
        try:
            uuid.UUID(str(self.cid))
        except ValueError:
            problems.append(f"cid is not a UUID: {self.cid!r}")
        if not isinstance(self.source_name, str) or not self.source_name:
            problems.append("source_name must be a non-empty string")
        if not isinstance(self.port, int) or not 0 < self.port <= 65535:
            problems.append(f"port must be 1-65535, got {self.port!r}")
        if not isinstance(self.priority, int) or not 0 <= self.priority <= MAX_PRIORITY:
            problems.append(f"priority must be 0-{MAX_PRIORITY}, got {self.priority!r}")
        if not isinstance(self.fps, int) or not 0 < self.fps <= 120:
            problems.append(f"fps must be 1-120, got {self.fps!r}")
        if isinstance(self.multicast_interface, bool) or not isinstance(self.multicast_interface, (type(None), int, str)):
            problems.append(f"multicast_interface must be an address, index or interface name, got {self.multicast_interface!r}")
        if not isinstance(self.unicast_host, (type(None), str)):
            problems.append(f"unicast_host must be a host name, got {self.unicast_host!r}")
        return problems

    def source_identity(self) -> SourceIdentity:
        return SourceIdentity(cid=uuid.UUID(str(self.cid)), name=self.source_name)


class ConfigManager:
    """Manages sender configuration loading and saving."""

    def __init__(self, config_file: str = DEFAULT_CONFIG_FILE, log_callback: Callable[[str], None] = print):
        """
        Initialize the configuration manager.

        Args:
            config_file (str): Path to the configuration file
            log_callback: Where load/save problems are reported
        """
        self.config_file = config_file
        self.log_callback = log_callback

    def load_config(self) -> SenderConfig:
        """
        Load configuration from JSON file.

        Values in the file are merged over the defaults. If the file has no
        CID, a new one is generated and the file is rewritten with it.

        Returns:
            SenderConfig: Loaded configuration, or defaults if loading fails
        """
        if not os.path.exists(self.config_file):
            return SenderConfig()
        try:
            with open(self.config_file, 'r') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("top level must be an object")
        except (OSError, ValueError) as e:
            self.log_callback(f"Error loading configuration: {e}")
            return SenderConfig()

        config = SenderConfig.from_dict(data)
        if 'cid' not in data:
            self.save_config(config)
        return config

    def save_config(self, config: SenderConfig) -> bool:
        """
        Save configuration to JSON file.

        Returns:
            bool: True if save was successful, False otherwise
        """
        try:
            with open(self.config_file, 'w') as f:
                json.dump(config.to_dict(), f, indent=2)
            return True
        except OSError as e:
            self.log_callback(f"Error saving configuration: {e}")
            return False


def resolve_interface(value: Optional[Union[str, int]]) -> Optional[Union[str, int]]:
    """Turn a configured interface (address, index or interface name) into an address or index."""
    if value is None or value == "":
        return None
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise AddressFamilyError(f"Unsupported interface setting: {value!r}")
    if isinstance(value, int):
        return value
    if value.isdigit():
        return int(value)
    if any(c in value for c in '.:'):
        return value
    return interface_address(value)


def build_sender(config: SenderConfig) -> SACNSender:
    """Create a sender from a configuration."""
    problems = config.validate()
    if problems:
        raise ValueError("Invalid configuration: " + "; ".join(problems))
    return SACNSender(
        config.source_identity(),
        port=config.port,
        default_priority=config.priority,
        unicast_host=config.unicast_host or None,
        multicast_interface=resolve_interface(config.multicast_interface),
    )
