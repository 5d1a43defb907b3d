from __future__ import annotations

"""backend/corsprobe/services/diagnostics/catalog.py

Static guidance shown for each diagnosis category.

This module is pure configuration data: one entry per category with a
title, a short description, an ordered checklist of questions to ask, and
an ordered list of remediation suggestions. Only the ``cors`` entry
carries server-side code examples and reading links. The examples are
illustrative text; nothing here is executed or checked against a server.
"""

import enum
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


class Category(str, enum.Enum):
    NETWORK = "network"
    CORS = "cors"
    FORBIDDEN = "forbidden"
    UNAUTHORIZED = "unauthorized"
    NOTFOUND = "notfound"
    SERVER = "server"
    RATELIMIT = "ratelimit"
    REQUEST = "request"
    HTTP = "http"
    UNKNOWN = "unknown"


class Severity(str, enum.Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


SEVERITY_BY_CATEGORY: Mapping[Category, Severity] = MappingProxyType(
    {
        Category.NETWORK: Severity.ERROR,
        Category.SERVER: Severity.ERROR,
        Category.CORS: Severity.WARNING,
        Category.FORBIDDEN: Severity.WARNING,
        Category.UNAUTHORIZED: Severity.WARNING,
        Category.NOTFOUND: Severity.INFO,
        Category.RATELIMIT: Severity.INFO,
        Category.REQUEST: Severity.INFO,
        Category.HTTP: Severity.INFO,
        Category.UNKNOWN: Severity.INFO,
    }
)


def severity_for(category: Category) -> Severity:
    return SEVERITY_BY_CATEGORY[category]


@dataclass(frozen=True)
class CodeExample:
    language: str
    code: str


@dataclass(frozen=True)
class Reference:
    title: str
    url: str


@dataclass(frozen=True)
class CatalogEntry:
    title: str
    description: str
    checklist: tuple[str, ...]
    solutions: tuple[str, ...]
    code_examples: tuple[CodeExample, ...] = field(default_factory=tuple)
    references: tuple[Reference, ...] = field(default_factory=tuple)


# ---- Server-side CORS snippets ----

_EXPRESS_SNIPPET = """\
// Add this to the server
app.use((req, res, next) => {
  res.header('Access-Control-Allow-Origin', '*');
  res.header('Access-Control-Allow-Methods', 'GET, POST, PUT, DELETE, OPTIONS');
  res.header('Access-Control-Allow-Headers', 'Content-Type, Authorization');
  if (req.method === 'OPTIONS') {
    return res.sendStatus(200);
  }
  next();
});"""

_FLASK_SNIPPET = """\
# Add this to the server
from flask import Flask
from flask_cors import CORS

app = Flask(__name__)
CORS(app, resources={r"/*": {"origins": "*"}})

@app.route('/')
def hello_world():
    return 'Hello, World!'"""

_SPRING_SNIPPET = """\
// Add this to the server
@Configuration
public class CorsConfig implements WebMvcConfigurer {
    @Override
    public void addCorsMappings(CorsRegistry registry) {
        registry.addMapping("/**")
                .allowedOrigins("*")
                .allowedMethods("GET", "POST", "PUT", "DELETE", "OPTIONS")
                .allowedHeaders("*");
    }
}"""


_ENTRIES: dict[Category, CatalogEntry] = {
    Category.NETWORK: CatalogEntry(
        title="Network connection error",
        description="A network connection to the server could not be established.",
        checklist=(
            "Is your network connection working?",
            "Is the API server online?",
            "Is the URL correct, including protocol, host and port?",
            "Is a firewall or proxy blocking the request?",
            "Could a security extension or local filter be blocking the request?",
        ),
        solutions=(
            "Test connectivity to the server with ping or telnet",
            "Try the request from a different network",
            "Check the server logs for more information",
        ),
    ),
    Category.CORS: CatalogEntry(
        title="CORS cross-origin error",
        description=(
            "The cross-origin request was blocked. This is a security mechanism "
            "that stops a site from reading resources served from a different origin."
        ),
        checklist=(
            "Does the server send the correct CORS response headers?",
            "Does the server answer the OPTIONS preflight request correctly?",
            "Does Access-Control-Allow-Origin include the calling origin or *?",
        ),
        solutions=(
            "Add the required CORS response headers on the server",
            "Forward the request through a proxy, for example a dev-server proxy",
            "During development only, temporarily disable CORS enforcement in the client",
            "If you control the server, implement CORS support there",
        ),
        code_examples=(
            CodeExample(language="Node.js (Express)", code=_EXPRESS_SNIPPET),
            CodeExample(language="Python (Flask)", code=_FLASK_SNIPPET),
            CodeExample(language="Java (Spring Boot)", code=_SPRING_SNIPPET),
        ),
        references=(
            Reference(
                title="MDN Web Docs: Cross-Origin Resource Sharing (CORS)",
                url="https://developer.mozilla.org/en-US/docs/Web/HTTP/CORS",
            ),
            Reference(
                title="web.dev: Cross-Origin Resource Sharing",
                url="https://web.dev/cross-origin-resource-sharing/",
            ),
        ),
    ),
    Category.FORBIDDEN: CatalogEntry(
        title="403 Forbidden",
        description="The server refused the request.",
        checklist=(
            "Are the credentials correct?",
            "Do you have permission to access this resource?",
            "Is the API key or token valid?",
            "Is the Authorization header correct?",
        ),
        solutions=(
            "Ask the API provider for the right access permissions",
            "Update the credentials",
            "Check the server logs for more details",
        ),
    ),
    Category.UNAUTHORIZED: CatalogEntry(
        title="401 Unauthorized",
        description="Authentication is required or has failed.",
        checklist=(
            "Were credentials provided at all?",
            "Is the token or API key valid?",
            "Has the token expired?",
            "Is the authentication scheme right (Basic, Bearer, ...)?",
        ),
        solutions=(
            "Obtain a fresh authentication token",
            "Check the format of the authentication header",
            "Confirm the authentication requirements in the API documentation",
        ),
    ),
    Category.NOTFOUND: CatalogEntry(
        title="404 Not Found",
        description="The requested resource does not exist.",
        checklist=(
            "Is the URL path correct?",
            "Does the API endpoint exist?",
            "Is the API version correct?",
            "Are the resource IDs and parameters valid?",
        ),
        solutions=(
            "Check the API documentation for the correct endpoint",
            "Check the URL for typos",
            "Ask the API provider whether the endpoint is available",
        ),
    ),
    Category.SERVER: CatalogEntry(
        title="500 Internal Server Error",
        description="The server hit an internal error.",
        checklist=(
            "Are the request parameters valid?",
            "Is the request format correct?",
            "Does the request body match what the API expects?",
            "What do the server logs say?",
        ),
        solutions=(
            "Report the problem to the API provider",
            "Check the API documentation for the correct request format",
            "Simplify the request to narrow down the problem",
        ),
    ),
    Category.RATELIMIT: CatalogEntry(
        title="429 Too Many Requests",
        description="The API request limit has been exceeded.",
        checklist=(
            "Are requests being sent too often?",
            "Has the API usage quota been reached?",
            "What do the rate limit headers in the response say?",
            "What are the limits described in the API documentation?",
        ),
        solutions=(
            "Throttle or rate-limit outgoing requests",
            "Ask the API provider for a higher quota",
            "Remove unnecessary API calls from the application",
            "Honour the Retry-After response header",
        ),
    ),
    Category.REQUEST: CatalogEntry(
        title="Request error",
        description="The request was sent but no response was received.",
        checklist=(
            "Is the request timeout long enough?",
            "Did the server process the request without answering?",
            "Was the network connection interrupted?",
            "Is the server under heavy load?",
        ),
        solutions=(
            "Increase the request timeout",
            "Check the server status and logs",
            "Retry the request once the cause is addressed",
        ),
    ),
    Category.HTTP: CatalogEntry(
        title="HTTP Error {status_code}",
        description="The server answered with an error HTTP status code.",
        checklist=(
            "What does this status code mean?",
            "Does the response body contain an error message?",
            "Are the request parameters and format correct?",
            "Are the authentication and authorization details correct?",
        ),
        solutions=(
            "Adjust the request based on the status code and response",
            "Check the API documentation on error handling",
            "Ask the API provider for help",
        ),
    ),
    Category.UNKNOWN: CatalogEntry(
        title="Unknown error",
        description="An error occurred that could not be classified.",
        checklist=(
            "What do the captured error signals say?",
            "What are the details of the network request?",
            "Do the request and response data look right?",
            "Does the request meet the API documentation requirements?",
        ),
        solutions=(
            "Simplify the request to narrow down the problem",
            "Inspect the captured signals for more information",
            "Ask the API provider for help",
        ),
    ),
}

DIAGNOSIS_CATALOG: Mapping[Category, CatalogEntry] = MappingProxyType(_ENTRIES)


def get_catalog_entry(category: Category) -> CatalogEntry:
    return DIAGNOSIS_CATALOG[category]
