class TraceFrameException(Exception):
    """Base exception class for trace frame operations"""
    pass

class MalformedDocumentException(TraceFrameException):
    """Raised when a span document defines conflicting nested paths or misses required span fields"""
    pass

class MissingAggregationDataException(TraceFrameException):
    """Raised when a trace bucket lacks a sub-aggregation the trace list relies on"""
    pass

class BadRequestException(TraceFrameException):
    """Raised when a traces query string cannot be interpreted"""
    pass
