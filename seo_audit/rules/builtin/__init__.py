"""Built-in rule modules. Each exposes a ``RULES`` tuple collected by ``seo_audit.rules.manifest``."""
