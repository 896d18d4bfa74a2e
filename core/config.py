# ================================================================
# File     : config.py
# Purpose  : Configuration management for RoleHound
# Notes    : Handles initial creation, loading, and saving of config
# ================================================================

import pathlib
from core.utils import fncPrintMessage, fncEnsureFolder, fncReadJSON, fncWriteJSON, fncLoadEnv

DEFAULT_HOME = pathlib.Path.home() / ".rolehound"


# ================================================================
# Function: fncDefaultConfig
# Purpose : Return a default configuration dictionary
# Notes   : Called when config file does not exist
# ================================================================
def fncDefaultConfig() -> dict:
    return {
        "version": "1.0",
        "rolehound_home": str(DEFAULT_HOME),
        "reports_dir": str(DEFAULT_HOME / "reports"),
        "debug": False,
        "parallel": 1,
        "providers": {
            "entra": {
                "tenant_id": "",
                "client_id": "",
                "client_secret": "",
                "authority": "https://login.microsoftonline.com"
            }
        }
    }


# ================================================================
# Function: fncInitConfig
# Purpose : Create or load configuration file
# Notes   : Ensures base folder exists; returns full config dict
# ================================================================
def fncInitConfig(config_path: str = None) -> dict:
    path = pathlib.Path(config_path or DEFAULT_HOME / "config.json")

    fncEnsureFolder(path.parent)

    if not path.exists():
        fncPrintMessage(f"No config found at {path}. Creating default...", "warn")
        cfg = fncDefaultConfig()
        fncWriteJSON(str(path), cfg)
        return fncApplyEnvOverrides(cfg)
    return fncLoadConfig(str(path))


# ================================================================
# Function: fncLoadConfig
# Purpose : Load configuration file and apply environment overrides
# Notes   : Missing keys are filled from the defaults
# ================================================================
def fncLoadConfig(config_path: str) -> dict:
    loaded = fncReadJSON(config_path)

    cfg = fncDefaultConfig()
    for key, val in loaded.items():
        if key != "providers":
            cfg[key] = val
    for provider, values in (loaded.get("providers") or {}).items():
        cfg["providers"].setdefault(provider, {}).update(values or {})

    fncPrintMessage(f"Loaded configuration from {config_path}", "debug")
    return fncApplyEnvOverrides(cfg)


# ================================================================
# Function: fncApplyEnvOverrides
# Purpose : Let ROLEHOUND_* environment variables win over the file
# Notes   : Useful in CI/CD or containers
# ================================================================
def fncApplyEnvOverrides(cfg: dict) -> dict:
    entra = cfg["providers"]["entra"]
    entra.update({
        "tenant_id": fncLoadEnv("ROLEHOUND_TENANT_ID", entra.get("tenant_id")),
        "client_id": fncLoadEnv("ROLEHOUND_CLIENT_ID", entra.get("client_id")),
        "client_secret": fncLoadEnv("ROLEHOUND_CLIENT_SECRET", entra.get("client_secret")),
    })
    return cfg


# ================================================================
# Function: fncGetProviderConfig
# Purpose : Return config block for a specific provider
# ================================================================
def fncGetProviderConfig(cfg: dict, provider: str) -> dict:
    providers = cfg.get("providers", {})
    if provider not in providers:
        fncPrintMessage(f"Provider not found in config: {provider}", "warn")
        return {}
    return providers[provider]


# ================================================================
# Function: fncApplyCliOverrides
# Purpose : Apply command-line flags to the loaded config
# Notes   : Handles --debug and --parallel
# ================================================================
def fncApplyCliOverrides(cfg: dict, args) -> dict:
    if getattr(args, "debug", None):
        cfg["debug"] = True
    if getattr(args, "parallel", None) is not None:
        cfg["parallel"] = max(1, int(args.parallel))
    return cfg


# ================================================================
# Function: fncIsDebug
# Purpose : Return whether debug mode is enabled in config
# ================================================================
def fncIsDebug(cfg: dict) -> bool:
    return bool(cfg.get("debug", False))
