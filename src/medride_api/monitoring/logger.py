import json
import sys
import traceback
from typing import Optional

import loguru
from fastapi import Request
from fastapi import Response
from loguru import logger

# Shown in place of the correlation id outside an HTTP request (startup, scripts)
NO_CORRELATION_ID = "-"

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<magenta>{correlation_id}</magenta> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<bold><white>{message}</white></bold> | <dim>{extra}</dim> {stacktrace}"
)


# Loggers configuration runs at the start of the application -- src/medride_api/__init__.py
def configure_logger(log_level: str = "INFO", service_name: Optional[str] = None) -> None:
    """
    Configure loguru with a single stdout sink.

    Every line carries the correlation id of the HTTP request being served
    (see RequestContextMiddleware), so the lines of one transport call can be
    picked out of interleaved output.

    Args:
        log_level: Minimum level written to stdout
        service_name: Bound to every record as ``service`` when given
    """
    logger.remove()  # remove the default logger
    logger.configure(extra={"service": service_name} if service_name else {})

    logger.add(
        sink=sys.stdout,
        level=log_level.upper(),
        diagnose=False,
        format=LOG_FORMAT,
        filter=process_log_record,
    )


def process_log_record(record: "loguru.Record") -> "loguru.Record":
    r"""
    Prepare a record for LOG_FORMAT.

    1. Lift ``correlation_id`` out of "extra" into its own column.
    2. Serialize the rest of "extra" to JSON so that it renders on a single line.
    3. For error logs, add a traceback with \r instead of \n so that log collectors do not
       split the traceback into multiple log events.
    """
    extra = dict(record["extra"])
    record["correlation_id"] = extra.pop("correlation_id", None) or NO_CORRELATION_ID

    if extra:
        record["extra"] = json.dumps(extra, default=str)
    else:
        record["extra"] = {}

    record["stacktrace"] = ""
    if record["exception"]:
        record["stacktrace"] = get_formatted_stacktrace(
            record["exception"], replace_newline_character_with_carriage_return=True
        )

    return record


def get_formatted_stacktrace(loguru_record_exception, replace_newline_character_with_carriage_return: bool) -> str:
    """Format an (exc_type, exc_value, traceback) triple as one string."""
    exc_type, exc_value, exc_traceback = loguru_record_exception
    stacktrace = "".join(traceback.format_exception(exc_type, exc_value, exc_traceback))
    if replace_newline_character_with_carriage_return:
        stacktrace = stacktrace.replace("\n", "\r")
    return stacktrace


def log_request_info(request: Request):
    """Log the incoming transport API call at DEBUG level."""
    logger.debug(
        "Request received",
        http_request={
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params.items()),
            "path_params": dict(request.path_params.items()),
            "client": str(request.client),
        },
    )


def log_response_info(response: Response):
    """Log the status and headers of an error response at DEBUG level."""
    logger.debug(
        "Response sent",
        http_response={
            "status_code": response.status_code,
            "request_id_header": response.headers.get("X-Request-ID"),
            "content_type": response.headers.get("content-type"),
        },
    )
