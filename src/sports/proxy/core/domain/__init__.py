from sports.proxy.core.domain.config import (
    DomainsConfig,
    DomainSpec,
    ToolRoute,
    load_domains_config,
    parse_domain_spec,
)
from sports.proxy.core.domain.registry import DEFAULT_ALIASES, DomainRegistry

__all__ = [
    "DomainsConfig",
    "DomainSpec",
    "ToolRoute",
    "load_domains_config",
    "parse_domain_spec",
    "DEFAULT_ALIASES",
    "DomainRegistry",
]
