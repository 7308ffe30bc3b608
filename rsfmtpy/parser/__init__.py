"""Parser infrastructure (token source + event-based parser + tree sink)."""

from rsfmtpy.parser.event import (
    Event,
    FinishEvent,
    StartEvent,
    TokenEvent,
    process_events,
)
from rsfmtpy.parser.marker import CompletedMarker, Marker
from rsfmtpy.parser.parser import Parser, ParserCheckpoint, ParserProgress
from rsfmtpy.parser.token_source import TokenSource, TokenSourceCheckpoint
from rsfmtpy.parser.parse_recovery import ParseRecoveryTokenSet, RecoveryError
from rsfmtpy.parser.parse_lists import ParseNodeList, ParseSeparatedList
from rsfmtpy.parser.tree_sink import LosslessTreeSink, ParsedGreenTree
from rsfmtpy.parser.grammar import parse_source_file
from rsfmtpy.parser.rust import parse, parse_result

__all__ = [
    "CompletedMarker",
    "Event",
    "FinishEvent",
    "LosslessTreeSink",
    "Marker",
    "ParseNodeList",
    "ParseRecoveryTokenSet",
    "ParseSeparatedList",
    "ParsedGreenTree",
    "Parser",
    "ParserCheckpoint",
    "ParserProgress",
    "RecoveryError",
    "StartEvent",
    "TokenEvent",
    "TokenSource",
    "TokenSourceCheckpoint",
    "parse",
    "parse_result",
    "parse_source_file",
    "process_events",
]
