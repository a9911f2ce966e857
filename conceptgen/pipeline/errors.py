"""Pipeline exception types."""


class PipelineError(Exception):
    """Error during pipeline execution."""

    pass


class DiscoveryError(PipelineError):
    """Structure discovery failed; there is nothing to enrich and the run aborts."""

    pass
