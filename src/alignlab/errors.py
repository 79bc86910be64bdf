# Copyright (c) Syntropy Systems
"""Exceptions raised by alignlab."""


class AlignlabError(Exception):
    """Base class for alignlab errors."""


class ConfigError(AlignlabError, ValueError):
    """Bad, missing or unknown configuration value."""


class MissingFile(AlignlabError, FileNotFoundError):
    """Required external file is absent."""


class LookupNotFound(AlignlabError, KeyError):
    """No score table row matches the requested keys."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ""


class DivisionUndefined(AlignlabError, ZeroDivisionError):
    """Beta-normalization denominator is zero."""


class MissingResult(AlignlabError, FileNotFoundError):
    """Expected alignment output is absent at collection time."""


class SubmissionError(AlignlabError, RuntimeError):
    """Cluster submission command failed."""


class AlignerError(AlignlabError, RuntimeError):
    """External aligner failed or produced no alignment."""
