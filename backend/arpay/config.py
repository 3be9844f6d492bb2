"""
Configuration for the AR agent payment core.

Loads and validates environment variables for route fee estimation, AR code
lifecycle timing and the optional remote persistence store.
"""

from decimal import Decimal
from typing import Optional

from pydantic_settings import BaseSettings


class ArPaySettings(BaseSettings):
    """AR payment core configuration."""

    # Route fee estimation (advisory, not an on-chain quote)
    route_base_fee: Decimal = Decimal("1.5")
    route_variable_rate_bp: Decimal = Decimal("10")  # 10 bp = 0.1%

    # AR code lifecycle
    code_default_ttl_ms: int = 5 * 60 * 1000  # 5 minutes
    code_tick_interval_s: float = 1.0
    code_removal_delay_s: float = 2.0
    code_history_limit: int = 50

    # Remote persistence store (optional; codes stay local-only without it)
    persistence_url: Optional[str] = None
    persistence_api_key: Optional[str] = None
    persistence_table: str = "ar_qr_codes"
    persistence_timeout_s: float = 10.0

    # Cluster assumed for Solana Pay URIs, which carry no chain id
    default_solana_chain_id: str = "devnet"

    # HTTP API
    api_port: int = 8000

    class Config:
        """Pydantic config."""
        env_prefix = "ARPAY_"
        env_file = ".env"
        case_sensitive = False

    def validate_config(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If a value is out of range
        """
        if self.route_base_fee < 0:
            raise ValueError(f"ARPAY_ROUTE_BASE_FEE must be >= 0, got {self.route_base_fee}")

        if self.route_variable_rate_bp < 0:
            raise ValueError(
                f"ARPAY_ROUTE_VARIABLE_RATE_BP must be >= 0, got {self.route_variable_rate_bp}"
            )

        if self.code_default_ttl_ms <= 0:
            raise ValueError(
                f"ARPAY_CODE_DEFAULT_TTL_MS must be positive, got {self.code_default_ttl_ms}"
            )

        if not 0 < self.code_tick_interval_s <= 1.0:
            raise ValueError(
                f"ARPAY_CODE_TICK_INTERVAL_S must be in (0, 1], got {self.code_tick_interval_s}"
            )

        if self.code_removal_delay_s < 0:
            raise ValueError(
                f"ARPAY_CODE_REMOVAL_DELAY_S must be >= 0, got {self.code_removal_delay_s}"
            )

        if self.persistence_url and not self.persistence_url.startswith(("http://", "https://")):
            raise ValueError(
                f"ARPAY_PERSISTENCE_URL must be an http(s) URL: {self.persistence_url}"
            )


# Global settings instance (HTTP entry point only; core components take
# settings explicitly)
settings = ArPaySettings()
