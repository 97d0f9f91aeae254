"""Load settings.yaml into typed dataclasses. Applies environment overrides."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from council.models import CouncilMember

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"


@dataclass
class GatewayConfig:
    base_url: str
    api_key_env: str
    timeout_sec: float
    chairman_timeout_sec: float
    title_timeout_sec: float
    max_tokens: int | None = None


@dataclass
class PromptsConfig:
    ranking: str
    synthesis: str
    title: str


@dataclass
class DefaultsConfig:
    chairman: str
    title_model: str
    output_dir: Path
    council: list[CouncilMember] = field(default_factory=list)


@dataclass
class AppConfig:
    gateway: GatewayConfig
    defaults: DefaultsConfig
    prompts: PromptsConfig


def parse_model_list(value: str) -> list[str]:
    """Split a comma-separated model list, dropping blanks."""
    return [m.strip() for m in value.split(",") if m.strip()]


def _parse_member(raw: str | dict) -> CouncilMember:
    if isinstance(raw, str):
        return CouncilMember(model=raw.strip())
    system_prompt = raw.get("system_prompt")
    return CouncilMember(
        model=str(raw["model"]).strip(),
        system_prompt=str(system_prompt).strip() if system_prompt else None,
    )


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing.
    COUNCIL_MODELS, CHAIRMAN_MODEL and TITLE_MODEL environment variables
    override the file. The API key itself is not read here; the provider
    looks it up from ``gateway.api_key_env`` when it is built.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    gateway_raw = raw["gateway"]
    max_tokens = gateway_raw.get("max_tokens")
    gateway = GatewayConfig(
        base_url=str(gateway_raw["base_url"]),
        api_key_env=str(gateway_raw["api_key_env"]),
        timeout_sec=float(gateway_raw["timeout_sec"]),
        chairman_timeout_sec=float(gateway_raw["chairman_timeout_sec"]),
        title_timeout_sec=float(gateway_raw["title_timeout_sec"]),
        max_tokens=int(max_tokens) if max_tokens else None,
    )

    defaults_raw = raw["defaults"]
    council = [_parse_member(m) for m in defaults_raw.get("council", [])]
    council = [m for m in council if m.model]
    chairman = str(defaults_raw["chairman"])
    title_model = str(defaults_raw.get("title_model") or chairman)

    env_council = os.environ.get("COUNCIL_MODELS", "").strip()
    if env_council:
        council = [CouncilMember(model=m) for m in parse_model_list(env_council)]
        logger.info("Council overridden from COUNCIL_MODELS: %d models", len(council))

    env_chairman = os.environ.get("CHAIRMAN_MODEL", "").strip()
    if env_chairman:
        chairman = env_chairman
        logger.info("Chairman overridden from CHAIRMAN_MODEL: %s", chairman)

    env_title = os.environ.get("TITLE_MODEL", "").strip()
    if env_title:
        title_model = env_title

    defaults = DefaultsConfig(
        chairman=chairman,
        title_model=title_model,
        output_dir=Path(defaults_raw["output_dir"]),
        council=council,
    )

    prompts_raw = raw["prompts"]
    prompts = PromptsConfig(
        ranking=prompts_raw["ranking"],
        synthesis=prompts_raw["synthesis"],
        title=prompts_raw["title"],
    )

    if not council:
        logger.warning("No default council configured; callers must supply members")

    return AppConfig(gateway=gateway, defaults=defaults, prompts=prompts)
