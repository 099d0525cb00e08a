"""
Configuration management for refinetrace.

This module handles loading, saving, and validating the run
configuration: conflict policy for pattern registration, report format,
invariant checking, and logging.
"""

import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from .core.patterns import ConflictPolicy
from .core.reporting import ReportFormat


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class RefineConfig:
    """Configuration for a refinement run."""
    
    # Pattern catalog
    conflict_policy: str = "warn"  # ignore | warn | reject
    
    # Output
    output_format: str = "text"  # text | json | yaml | table
    
    # Validation
    check_invariants: bool = True  # Check invariants after every pattern
    
    # Logging
    log_level: str = "WARNING"
    log_file: bool = False
    log_dir: Optional[str] = None
    log_json: bool = True
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RefineConfig':
        """Create from dictionary, ignoring unknown keys."""
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise TypeError(f"config must be a mapping, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
    
    @property
    def policy(self) -> ConflictPolicy:
        return ConflictPolicy(self.conflict_policy)
    
    @property
    def report_format(self) -> ReportFormat:
        return ReportFormat(self.output_format)
    
    def validate(self, console: Optional[Console] = None) -> bool:
        """Validate configuration parameters."""
        errors = []
        
        policies = [p.value for p in ConflictPolicy]
        if self.conflict_policy not in policies:
            errors.append(f"conflict_policy must be one of {policies}, got {self.conflict_policy!r}")
        
        formats = [f.value for f in ReportFormat]
        if self.output_format not in formats:
            errors.append(f"output_format must be one of {formats}, got {self.output_format!r}")
        
        if str(self.log_level).upper() not in LOG_LEVELS:
            errors.append(f"log_level must be one of {list(LOG_LEVELS)}, got {self.log_level!r}")
        
        for name in ("check_invariants", "log_file", "log_json"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                errors.append(f"{name} must be true or false, got {value!r}")
        
        if errors:
            console = console or Console(stderr=True)
            console.print("[red]Configuration validation errors:[/red]")
            for error in errors:
                console.print(f"  • {error}")
        
        return not errors


class ConfigManager:
    """Manages refinetrace configuration."""
    
    DEFAULT_CONFIG_FILE = ".refinetrace.yml"
    ENV_PREFIX = "REFINETRACE_"
    
    def __init__(self, config_path: Optional[Path] = None, console: Optional[Console] = None):
        """
        Initialize config manager.
        
        Args:
            config_path: Path to configuration file
            console: Console for status messages (stderr by default)
        """
        self.console = console or Console(stderr=True)
        self.config_path = Path(config_path) if config_path else Path(self.DEFAULT_CONFIG_FILE)
        self._config: Optional[RefineConfig] = None
    
    def load(self) -> RefineConfig:
        """
        Load configuration from file or create default.
        
        Returns:
            Loaded or default configuration
        """
        if self._config is not None:
            return self._config
        
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = yaml.safe_load(f)
                self._config = RefineConfig.from_dict(data or {})
            except (OSError, yaml.YAMLError, TypeError) as e:
                self.console.print(f"[red]Error loading config: {e}[/red]")
                self._config = RefineConfig()
        else:
            self._config = RefineConfig()
        
        self._apply_env_overrides()
        
        return self._config
    
    def save(self, config: Optional[RefineConfig] = None) -> bool:
        """
        Save configuration to file.
        
        Args:
            config: Configuration to save (uses current if None)
            
        Returns:
            True if successful
        """
        config = config or self._config or RefineConfig()
        
        try:
            with open(self.config_path, 'w') as f:
                yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
            self.console.print(f"[green]Saved config to {self.config_path}[/green]")
            return True
        except OSError as e:
            self.console.print(f"[red]Error saving config: {e}[/red]")
            return False
    
    def update(self, **kwargs) -> RefineConfig:
        """
        Update configuration parameters.
        
        Args:
            **kwargs: Parameters to update
            
        Returns:
            Updated configuration
        """
        if self._config is None:
            self._config = self.load()
        
        for key, value in kwargs.items():
            if hasattr(self._config, key):
                setattr(self._config, key, value)
            else:
                self.console.print(f"[yellow]Warning: Unknown parameter '{key}'[/yellow]")
        
        return self._config
    
    def display(self, config: Optional[RefineConfig] = None):
        """
        Display configuration in a formatted panel.
        
        Args:
            config: Configuration to display (uses current if None)
        """
        config = config or self._config or self.load()
        
        yaml_str = yaml.dump(config.to_dict(), default_flow_style=False, sort_keys=False)
        
        syntax = Syntax(yaml_str, "yaml", theme="monokai", line_numbers=True)
        panel = Panel(
            syntax,
            title="[bold cyan]refinetrace Configuration[/bold cyan]",
            border_style="cyan"
        )
        
        self.console.print(panel)
    
    def _apply_env_overrides(self):
        """Apply REFINETRACE_* environment variable overrides."""
        if self._config is None:
            return
        
        for name in ("conflict_policy", "output_format", "log_level", "log_dir"):
            if value := os.getenv(f"{self.ENV_PREFIX}{name.upper()}"):
                setattr(self._config, name, value)
        
        for name in ("check_invariants", "log_file", "log_json"):
            if value := os.getenv(f"{self.ENV_PREFIX}{name.upper()}"):
                setattr(self._config, name, value.lower() in ("true", "yes", "1"))


# Global config manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_path: Optional[Path] = None) -> ConfigManager:
    """
    Get global config manager instance.
    
    Args:
        config_path: Optional path to config file
        
    Returns:
        Config manager instance
    """
    global _config_manager
    
    if _config_manager is None or (config_path and Path(config_path) != _config_manager.config_path):
        _config_manager = ConfigManager(config_path)
    
    return _config_manager


def get_config(config_path: Optional[Path] = None) -> RefineConfig:
    """Get current configuration."""
    return get_config_manager(config_path).load()


def save_config(config: RefineConfig, config_path: Optional[Path] = None) -> bool:
    """Save configuration."""
    return get_config_manager(config_path).save(config)


def create_default_config_file(path: Optional[Path] = None) -> bool:
    """
    Create a default configuration file.
    
    Args:
        path: Path for config file
        
    Returns:
        True if successful
    """
    path = Path(path) if path else Path(ConfigManager.DEFAULT_CONFIG_FILE)
    return ConfigManager(path).save(RefineConfig())
