"""Allow ``python -m fc_metrics_updater``."""

from .cli import app

app(prog_name="fc-metrics-updater")
