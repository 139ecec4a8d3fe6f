"""Fetching, parsing and date normalisation of the blog page."""

from .dates import DateNormalizer
from .errors import (
    EmptyResult,
    IngestionError,
    ParseFailure,
    RunCancelled,
    ServerFailure,
    TransportFailure,
    failure_for_outcome,
)
from .extractor import ArticleExtractor, CandidateResult, ExtractionReport, FieldResult
from .fetcher import HttpFetcher
from .samples import sample_articles

__all__ = [
    "DateNormalizer",
    "EmptyResult",
    "IngestionError",
    "ParseFailure",
    "RunCancelled",
    "ServerFailure",
    "TransportFailure",
    "failure_for_outcome",
    "ArticleExtractor",
    "CandidateResult",
    "ExtractionReport",
    "FieldResult",
    "HttpFetcher",
    "sample_articles",
]
