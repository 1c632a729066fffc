import os
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from solders.pubkey import Pubkey
from core.errors import TipError
from core.utils import parse_amount, to_lamports

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    rpc_url: str = os.getenv("SOLANA_RPC_URL", "https://api.devnet.solana.com")
    rpc_timeout: float = 5.0
    recipient_address: str = "AczLKrdS6hFGNoTWg9AaS9xhuPfZgVTPxL2W8XzZMDjH"

    # Action descriptor
    tip_amounts: list[str] = ["0.01", "0.1"]
    allow_custom_amount: bool = True
    icon: str = "/tipjar.png"
    title: str = "Dar propina"
    description: str = "¡Apoya mi trabajo con Solana Colombia!"
    label: str = "Enviar"
    custom_amount_label: str = "Monto en SOL"
    thank_you_message: str = "Gracias por tu propina de {amount} SOL!"

    rate_limit: str = "60/minute"

    @field_validator("recipient_address")
    @classmethod
    def check_recipient_address(cls, value: str) -> str:
        Pubkey.from_string(value)
        return value

    @field_validator("tip_amounts")
    @classmethod
    def check_tip_amounts(cls, value: list[str]) -> list[str]:
        for amount in value:
            try:
                to_lamports(parse_amount(amount))
            except TipError as exc:
                raise ValueError(f"Invalid tip amount {amount!r}: {exc.message}") from exc
        return value

setting = Settings()
