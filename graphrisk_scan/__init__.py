"""GraphRisk scan client — submit a manifest, wait for the job, fetch SARIF."""

__version__ = "0.1.0"
