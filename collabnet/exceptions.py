from __future__ import annotations

import csv
import socket
import xml.etree.ElementTree as ElementTree

import requests

__all__ = [
    "HTTP_ERRORS",
    "TIMEOUT_ERRORS",
    "NETWORK_ERRORS",
    "DECODE_ERRORS",
    "PARSE_ERRORS",
    "XML_PARSE_ERRORS",
    "PAGE_ERRORS",
    "FILE_IO_ERRORS",
    "FILE_WRITE_ERRORS",
]

# errors raised by requests when an HTTP request fails, a URL cannot be reached,
# or the server answers with a non-2xx status
HTTP_ERRORS = (requests.exceptions.RequestException,)

# errors that signal an operation has taken too long and hit a timeout at the OS or socket level
TIMEOUT_ERRORS = (TimeoutError, socket.timeout)

# umbrella group for network-related failures, combining HTTP issues and timeouts
NETWORK_ERRORS = HTTP_ERRORS + TIMEOUT_ERRORS

# errors that occur when converting response bytes into text using a specific encoding
DECODE_ERRORS = (UnicodeDecodeError, UnicodeError)

# errors raised while interpreting extracted fields
PARSE_ERRORS = (ValueError, TypeError, KeyError)

# XML parsing errors when processing DBLP person records
XML_PARSE_ERRORS = (ElementTree.ParseError, ValueError, TypeError)

# everything that ends the processing of a single fetched page without
# affecting the rest of the crawl
PAGE_ERRORS = NETWORK_ERRORS + DECODE_ERRORS + XML_PARSE_ERRORS + PARSE_ERRORS

# file system operation errors when opening or creating output files
# Note: FileNotFoundError is a subclass of OSError, so both are included for clarity
FILE_IO_ERRORS = (FileNotFoundError, OSError)

# file write operation errors including permissions, disk full, and encoding issues
FILE_WRITE_ERRORS = (csv.Error, OSError, TypeError, UnicodeEncodeError)
