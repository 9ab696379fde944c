"""
Configuration models using Pydantic for type-safe validation.

This module defines all configuration models for the exchange store:
- SystemConfig: Log level, log format, log file
- SchemaNames: Schema and table names the exchange provisions
- DatabaseConfig: Store driver, address, credentials
- CoinConfig: Coins supported by the exchange
- AppConfig: Complete application configuration
"""

from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, SecretStr, validator


# ============================================================================
# Enums for Configuration
# ============================================================================

class LogLevel(str, Enum):
    """Logging level."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class DatabaseDriver(str, Enum):
    """Relational store backing the exchange."""
    MYSQL = "mysql"
    DUCKDB = "duckdb"


# ============================================================================
# System Configuration
# ============================================================================

class SystemConfig(BaseModel):
    """System-wide settings."""

    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level"
    )

    json_logs: bool = Field(
        default=False,
        description="Emit JSON formatted log lines"
    )

    log_file: Optional[Path] = Field(
        default=None,
        description="Optional log file path"
    )

    class Config:
        use_enum_values = True


# ============================================================================
# Database Configuration
# ============================================================================

class SchemaNames(BaseModel):
    """Names of the schemas (and fixed tables) the exchange provisions."""

    balance: str = Field(default="balances", description="Per-coin balance tables")
    deposit: str = Field(default="deposit", description="Per-coin deposit address tables")
    pending_deposit: str = Field(
        default="pending_deposits",
        description="Per-coin pending deposit tables, emptied on every start"
    )
    order: str = Field(default="orders", description="Per-pair order book tables")
    peer: str = Field(default="peers", description="Peer directory schema")
    peer_table: str = Field(default="opencxpeers", description="Peer directory table")
    puzzle: str = Field(default="puzzle", description="Per-auction puzzle tables")
    auction_order: str = Field(
        default="auctionorders",
        description="Per-pair auction order book tables"
    )

    @validator('*')
    def name_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("schema and table names must not be blank")
        return v

    def client_schemas(self) -> List[str]:
        """Schemas created during client setup, in creation order."""
        return [self.balance, self.deposit, self.pending_deposit, self.order, self.peer]

    def auction_schemas(self) -> List[str]:
        return [self.auction_order, self.puzzle]


class DatabaseConfig(BaseModel):
    """Store connection settings."""

    driver: DatabaseDriver = Field(
        default=DatabaseDriver.MYSQL,
        description="Database driver"
    )

    host: str = Field(default="localhost", description="Database host")

    port: int = Field(
        default=3306,
        ge=1,
        le=65535,
        description="Database port"
    )

    username: str = Field(default="opencx", description="Operating user")

    password: SecretStr = Field(
        default=SecretStr(""),
        description="Operating user password"
    )

    root_username: Optional[str] = Field(
        default=None,
        description="Privileged user for schema creation (defaults to username)"
    )

    root_password: Optional[SecretStr] = Field(
        default=None,
        description="Privileged user password (defaults to password)"
    )

    connect_timeout: int = Field(
        default=10,
        ge=1,
        le=300,
        description="Connect timeout in seconds (mysql)"
    )

    duckdb_path: Path = Field(
        default=Path("data/exchange.duckdb"),
        description="Database file for the duckdb driver"
    )

    schemas: SchemaNames = Field(
        default_factory=SchemaNames,
        description="Schema and table names"
    )

    class Config:
        use_enum_values = True


# ============================================================================
# Coin Configuration
# ============================================================================

class CoinConfig(BaseModel):
    """A coin supported by the exchange."""

    name: str = Field(description="Chain identifier, used as the per-coin table name")
    ticker: str = Field(description="Asset ticker, used in pair names")

    @validator('ticker')
    def ticker_lowercase(cls, v):
        return v.lower()


# ============================================================================
# Complete Application Configuration
# ============================================================================

class AppConfig(BaseModel):
    """Complete application configuration."""

    system: SystemConfig = Field(
        default_factory=SystemConfig,
        description="System configuration"
    )

    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig,
        description="Database configuration"
    )

    coins: List[CoinConfig] = Field(
        default_factory=list,
        description="Supported coins"
    )

    class Config:
        use_enum_values = True
