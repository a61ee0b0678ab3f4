"""Configuration management for loan-recon."""

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any

from loan_recon.exceptions import ConfigurationError

PERSISTENCE_BACKENDS = ("none", "json", "kafka", "postgres")


@dataclass
class ReconConfig:
    """Derivation and grid settings."""

    # Interest share of the paid total when the engine gives no aggregates
    fallback_interest_ratio: Decimal = Decimal("0.30")
    late_interest_monthly_rate: Decimal = Decimal("0.01")
    late_fine_rate: Decimal = Decimal("0.02")
    page_size: int = 30
    money_quantum: Decimal = Decimal("0.01")

    def __post_init__(self) -> None:
        if not Decimal("0") <= self.fallback_interest_ratio <= Decimal("1"):
            raise ConfigurationError(
                f"fallback_interest_ratio must be within [0, 1], got {self.fallback_interest_ratio}"
            )
        if self.page_size <= 0:
            raise ConfigurationError(f"page_size must be positive, got {self.page_size}")


@dataclass
class PersistenceConfig:
    """Snapshot persistence configuration."""

    backend: str = "none"
    contract_debounce_seconds: float = 1.0

    def __post_init__(self) -> None:
        if self.backend not in PERSISTENCE_BACKENDS:
            raise ConfigurationError(
                f"Unknown persistence backend {self.backend!r}, expected one of {PERSISTENCE_BACKENDS}"
            )
        if self.contract_debounce_seconds < 0:
            raise ConfigurationError("contract_debounce_seconds cannot be negative")


@dataclass
class KafkaConfig:
    """Kafka producer configuration."""

    bootstrap_servers: str = "localhost:9092"
    topic: str = "recon.snapshots"
    acks: str = "all"
    linger_ms: int = 5
    compression: str = "snappy"
    retries: int = 3

    def to_dict(self) -> dict[str, Any]:
        """Convert to confluent-kafka config dict."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "acks": self.acks,
            "linger.ms": self.linger_ms,
            "compression.type": self.compression,
            "retries": self.retries,
        }


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "loanrecon"
    user: str = "postgres"
    password: str = "postgres"

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class OutputConfig:
    """Output configuration."""

    json_output_dir: Path = field(default_factory=lambda: Path("output"))
    pretty_json: bool = False


@dataclass
class LoanReconConfig:
    """Main configuration for loan-recon."""

    recon: ReconConfig = field(default_factory=ReconConfig)
    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)
    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    seed: int | None = None
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "LoanReconConfig":
        """Create config from environment variables."""
        import os

        recon = ReconConfig(
            fallback_interest_ratio=Decimal(os.getenv("FALLBACK_INTEREST_RATIO", "0.30")),
            page_size=int(os.getenv("GRID_PAGE_SIZE", "30")),
        )

        persistence = PersistenceConfig(
            backend=os.getenv("PERSISTENCE_BACKEND", "none"),
            contract_debounce_seconds=float(os.getenv("CONTRACT_DEBOUNCE_SECONDS", "1.0")),
        )

        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            topic=os.getenv("KAFKA_SNAPSHOT_TOPIC", "recon.snapshots"),
            acks=os.getenv("KAFKA_ACKS", "all"),
        )

        postgres = PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=int(os.getenv("POSTGRES_PORT", "5432")),
            database=os.getenv("POSTGRES_DB", "loanrecon"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", "postgres"),
        )

        output = OutputConfig(
            json_output_dir=Path(os.getenv("OUTPUT_DIR", "output")),
            pretty_json=os.getenv("PRETTY_JSON", "false").lower() == "true",
        )

        return cls(
            recon=recon,
            persistence=persistence,
            kafka=kafka,
            postgres=postgres,
            output=output,
            seed=int(os.getenv("SEED")) if os.getenv("SEED") else None,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )
