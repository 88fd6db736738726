from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_reasoning_model: str = "gpt-4o"
    openai_realtime_model: str = "gpt-4o-realtime-preview"
    openai_transcribe_model: str = "gpt-4o-mini-transcribe"
    case_profile: str = "lees_v_lees"
    log_level: str = "INFO"

    model_config = {"env_file": ".env"}


settings = Settings()
