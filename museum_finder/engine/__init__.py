"""Engine components: filter → classify → probe → sink."""

from .dispatcher import DispatchStats, TaskDispatcher
from .fetcher import FetchError, FetchResponse, Fetcher
from .predicates import TagClassifier
from .probe_bag import ProbeBag, classify
from .prober import ArticleProber
from .race import race_until
from .record_filter import Tag, admit
from .sink import Payload, Shutdown, Sink, SinkClosedError, SinkError

__all__ = [
    "ArticleProber",
    "DispatchStats",
    "FetchError",
    "FetchResponse",
    "Fetcher",
    "Payload",
    "ProbeBag",
    "Shutdown",
    "Sink",
    "SinkClosedError",
    "SinkError",
    "Tag",
    "TagClassifier",
    "TaskDispatcher",
    "admit",
    "classify",
    "race_until",
]
