from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    elevenlabs_api_key: str = ""
    elevenlabs_api_base: str = "https://api.elevenlabs.io"
    elevenlabs_call_provider: str = "twilio"  # twilio | sip-trunk
    http_timeout: float = 30.0
    log_level: str = "INFO"
