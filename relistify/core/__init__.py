"""Core: URL parsing, platform clients, track matching, conversion jobs."""
from relistify.core.conversion_job import ConversionJob, JobState
from relistify.core.errors import AuthError, ConfigurationError, RelistifyError, UpstreamError
from relistify.core.url_parser import parse_playlist_url

__all__ = [
    "AuthError",
    "ConfigurationError",
    "ConversionJob",
    "JobState",
    "RelistifyError",
    "UpstreamError",
    "parse_playlist_url",
]
