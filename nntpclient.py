import abc
import enum
import logging
import re
import socket
import typing
import zlib

logger = logging.getLogger(__name__)


class NNTPClientError(Exception):
    DEFAULT = "Client error"

    def __init__(self, *args: typing.Any) -> None:
        Exception.__init__(self, *args)
        try:
            self.response = args[0]
        except IndexError:
            self.response = self.DEFAULT


class NNTPNotConnected(NNTPClientError):
    DEFAULT = "Not connected"


class NNTPServiceUnavailable(NNTPClientError):
    DEFAULT = "Service unavailable"


class NNTPNoSuchGroup(NNTPClientError):
    DEFAULT = "No such newsgroup"


class NNTPNoSuchArticle(NNTPClientError):
    DEFAULT = "No such article"


class NNTPInvalidSyntax(NNTPClientError):
    DEFAULT = "Invalid syntax for article ID"


class NNTPUnexpectedResponse(NNTPClientError):
    DEFAULT = "Unexpected response received"


class NNTPMissingCredential(NNTPClientError):
    DEFAULT = "Missing credential"


class NNTPProtocolError(NNTPClientError):
    DEFAULT = "Invalid response"


class NNTPTransportError(NNTPClientError):
    DEFAULT = "Transport error"


class NNTPDecompressionError(NNTPClientError):
    DEFAULT = "Decompression failed"


# Standard port used by NNTP servers
NNTP_PORT = 119
_RECV_SIZE = 4096

_CRLF = b"\r\n"
_TERMINATOR = b".\r\n"
_BLOCK_END = _CRLF + _TERMINATOR

DEFAULT_ENCODING = "latin-1"

# Default decoded value for LIST OVERVIEW.FMT if not supported
_DEFAULT_OVERVIEW_FMT = [
    "Subject:",
    "From:",
    "Date:",
    "Message-ID:",
    "References:",
    ":bytes",
    ":lines",
]


class NNTPStatus(enum.IntEnum):
    # RFC 3977 (Oct 2006) supersedes RFC 977 (Feb 1986)
    HELP_FOLLOWS = 100
    CAPABILITIES_FOLLOW = 101
    POSTING_ALLOWED = 200
    POSTING_PROHIBITED = 201
    GROUP_SELECTED = 211
    MULTILINE_FOLLOWS = 215
    ARTICLE_RETRIEVED = 220
    HEAD_RETRIEVED = 221
    BODY_RETRIEVED = 222
    OVERVIEW_FOLLOWS = 224
    HEADERS_FOLLOW = 225
    NEW_ARTICLES_FOLLOW = 230
    NEW_GROUPS_FOLLOW = 231
    NO_SUCH_GROUP = 411
    NO_SUCH_ARTICLE_NUMBER = 423
    NO_SUCH_ARTICLE = 430
    SYNTAX_ERROR = 501
    # RFC 4643 (Oct 2006)
    AUTHENTICATION_ACCEPTED = 281
    PASSWORD_REQUIRED = 381


_MULTILINE_STATUSES = frozenset(
    {
        NNTPStatus.HELP_FOLLOWS,
        NNTPStatus.CAPABILITIES_FOLLOW,
        # only the LISTGROUP form of 211 carries a block
        NNTPStatus.GROUP_SELECTED,
        NNTPStatus.MULTILINE_FOLLOWS,
        NNTPStatus.ARTICLE_RETRIEVED,
        NNTPStatus.HEAD_RETRIEVED,
        NNTPStatus.BODY_RETRIEVED,
        NNTPStatus.OVERVIEW_FOLLOWS,
        NNTPStatus.HEADERS_FOLLOW,
        NNTPStatus.NEW_ARTICLES_FOLLOW,
        NNTPStatus.NEW_GROUPS_FOLLOW,
    }
)


def is_multiline(status: int) -> bool:
    """Return True if a reply with this status code is followed by a
    dot-terminated block. Syntax errors and unknown codes are single-line.
    """
    return status in _MULTILINE_STATUSES


class Response(typing.NamedTuple):
    status: int
    message: str
    lines: typing.Tuple[str, ...] = ()


STATUS_LINE_RE = re.compile(r"^(?P<status>\d{3}) (?P<message>.+)$", re.DOTALL)


def parse_status_line(line: str) -> Response:
    match = STATUS_LINE_RE.match(line.strip())
    if not match:
        raise NNTPProtocolError(f"Invalid response given: {line!r}")
    status = int(match.group("status"))
    if status < 100 or status >= 600:
        raise NNTPProtocolError(f"Invalid status code given: {status}")
    return Response(status, match.group("message"))


def _windows1252_table() -> typing.Dict[int, str]:
    table = {}
    for code in range(0x80, 0xA0):
        try:
            table[code] = bytes([code]).decode("cp1252")
        except UnicodeDecodeError:
            # 0x81, 0x8D, 0x8F, 0x90 and 0x9D are undefined in Windows-1252
            pass
    return table


_WINDOWS_1252_C1 = _windows1252_table()


def patch_windows1252(text: str) -> str:
    """Replace C1 control characters with the printable characters that
    Windows-1252 puts in the same slots, for text that was decoded as
    Latin-1 but written as Windows-1252.
    """
    return text.translate(_WINDOWS_1252_C1)


def decode_string(data: bytes, encoding: str = DEFAULT_ENCODING) -> str:
    text = data.decode(encoding, errors="replace")
    if encoding == DEFAULT_ENCODING:
        text = patch_windows1252(text)
    return text


_CHARSET_ENCODINGS = {
    "utf-8": "utf-8",
    "utf8": "utf-8",
    "utf-16le": "utf-16-le",
    "utf16le": "utf-16-le",
    "iso-8859-1": DEFAULT_ENCODING,
    "latin1": DEFAULT_ENCODING,
}


def charset_to_encoding(charset: str) -> str:
    return _CHARSET_ENCODINGS.get(charset.casefold(), DEFAULT_ENCODING)


_HEADER_END = _CRLF + _CRLF
CHARSET_RE = re.compile(
    rb"\nContent-Type:.*;\s*charset=\"?(?P<charset>[^\s\";]+)", re.IGNORECASE
)
BOUNDARY_RE = re.compile(
    rb"\nContent-Type:\s*multipart.*;\s*boundary=\"?(?P<boundary>[^\s\";]+)",
    re.IGNORECASE,
)


def _header_section(block: bytes) -> typing.Optional[bytes]:
    blank = block.find(_HEADER_END)
    if blank > 0:
        return block[:blank]
    return None


def transcode_part(part: bytes) -> str:
    headers = _header_section(part)
    if headers is not None:
        match = CHARSET_RE.search(headers)
        if match:
            encoding = charset_to_encoding(match.group("charset").decode("ascii"))
            if encoding != DEFAULT_ENCODING:
                return decode_string(part, encoding)
    return decode_string(part)


def transcode_block(block: bytes) -> str:
    """Decode a complete multi-line block.

    Each part of a multipart article is decoded on its own, so a part that
    declares a charset does not affect its siblings. Everything else falls
    back to Latin-1 with Windows-1252 repair.
    """
    headers = _header_section(block)
    if headers is not None:
        match = BOUNDARY_RE.search(headers)
        if match:
            boundary = b"--" + match.group("boundary")
            parts = [transcode_part(part) for part in block.split(boundary)]
            return boundary.decode(DEFAULT_ENCODING).join(parts)
    return transcode_part(block)


def stuff_line(line: str) -> str:
    if line.startswith("."):
        return f".{line}"
    return line


def unstuff_line(line: str) -> str:
    if line == ".":
        return ""
    if line.startswith(".."):
        return line[1:]
    return line


class Stage(abc.ABC):
    """One step of a response pipeline.

    feed() takes the next chunk from upstream and returns zero or more
    outputs for the next stage. finish() is called once when upstream has
    no more input. A stage sets done when it will produce nothing more.
    """

    def __init__(self) -> None:
        self.done: bool = False

    @abc.abstractmethod
    def feed(self, chunk: typing.Any) -> typing.List[typing.Any]:
        ...

    def finish(self) -> typing.List[typing.Any]:
        return []


class StatusLineStage(Stage):
    def __init__(self) -> None:
        super().__init__()
        self._buffer: bytes = b""

    def feed(self, chunk: bytes) -> typing.List[str]:
        self._buffer += chunk
        crlf = self._buffer.find(_CRLF)
        if crlf == -1:
            return []
        self.done = True
        return [decode_string(self._buffer[:crlf])]


class MultilineStage(Stage):
    class State(enum.Enum):
        AWAITING_FIRST_CHUNK = enum.auto()
        ACCUMULATING = enum.auto()

    def __init__(self) -> None:
        super().__init__()
        self.state = self.State.AWAITING_FIRST_CHUNK
        self._buffer: bytes = b""

    def feed(self, chunk: bytes) -> typing.List[str]:
        self._buffer += chunk
        if self.state is self.State.AWAITING_FIRST_CHUNK:
            crlf = self._buffer.find(_CRLF)
            if crlf == -1:
                return []
            status = self._buffer[:3]
            if not (status.isdigit() and is_multiline(int(status))):
                # error replies such as 430 or 501 carry no block
                self.done = True
                return [decode_string(self._buffer)]
            self.state = self.State.ACCUMULATING
        if not self._buffer.endswith(_BLOCK_END):
            return []
        self.done = True
        text = transcode_block(self._buffer[: -len(_TERMINATOR)])
        status_line, *lines = text.strip().split("\r\n")
        return [status_line] + [unstuff_line(line) for line in lines]


class StrayTerminatorStage(Stage):
    """Drop a clear-text terminator line that opens the input.

    Some servers send the terminator of a compressed reply after the
    deflate stream. When it arrives only after that reply was complete it
    is the first thing read for the next command.
    """

    def __init__(self) -> None:
        super().__init__()
        self._buffer: bytes = b""
        self._checked: bool = False

    def feed(self, chunk: bytes) -> typing.List[bytes]:
        if self._checked:
            return [chunk]
        self._buffer += chunk
        if self._buffer != _TERMINATOR and _TERMINATOR.startswith(self._buffer):
            return []
        self._checked = True
        data, self._buffer = self._buffer, b""
        if data.startswith(_TERMINATOR):
            data = data[len(_TERMINATOR) :]
        return [data] if data else []

    def finish(self) -> typing.List[bytes]:
        self.done = True
        if self._checked or not self._buffer:
            return []
        return [self._buffer]


class DecompressionStage(Stage):
    """Split off the clear-text status line of an XZVER reply and inflate
    the deflate payload that follows it.

    Bytes after the deflate stream may only be a clear-text terminator;
    anything else is an error. trailer_pending is set when the stream ended
    flush with the input, so such a terminator may still be on its way.
    """

    def __init__(self) -> None:
        super().__init__()
        self._buffer: bytes = b""
        self._status_sent: bool = False
        self._inflater = zlib.decompressobj()
        self._inflated: typing.List[bytes] = []
        self._trailer: bytes = b""
        self.trailer_pending: bool = False

    def feed(self, chunk: bytes) -> typing.List[bytes]:
        ret: typing.List[bytes] = []
        if not self._status_sent:
            self._buffer += chunk
            crlf = self._buffer.find(_CRLF)
            if crlf == -1:
                return ret
            crlf += len(_CRLF)
            ret.append(self._buffer[:crlf])
            self._status_sent = True
            status = self._buffer[:3]
            chunk = self._buffer[crlf:]
            self._buffer = b""
            if not (status.isdigit() and is_multiline(int(status))):
                # error replies carry no compressed payload
                self.done = True
                return ret
        if self._inflater.eof:
            self._trailer += chunk
        else:
            self._inflate(chunk)
            if not self._inflater.eof:
                return ret
            self._trailer = self._inflater.unused_data
            if not self._trailer:
                self.trailer_pending = True
                return ret + self._payload()
        if self._trailer == _TERMINATOR:
            return ret + self._payload()
        if _TERMINATOR.startswith(self._trailer):
            return ret
        raise NNTPDecompressionError(
            f"Unexpected data after compressed payload: {self._trailer[:32]!r}"
        )

    def finish(self) -> typing.List[bytes]:
        if self.done:
            return []
        if not self._status_sent:
            self.done = True
            return []
        if not self._inflater.eof:
            try:
                self._inflated.append(self._inflater.flush())
            except zlib.error as exc:
                raise NNTPDecompressionError(
                    f"Corrupt compressed payload: {exc}"
                ) from exc
            if not self._inflater.eof:
                raise NNTPDecompressionError("Compressed payload ended prematurely")
        elif self._trailer:
            raise NNTPDecompressionError(
                f"Incomplete terminator after compressed payload: {self._trailer!r}"
            )
        return self._payload()

    def _inflate(self, data: bytes) -> None:
        if not data:
            return
        try:
            self._inflated.append(self._inflater.decompress(data))
        except zlib.error as exc:
            raise NNTPDecompressionError(f"Corrupt compressed payload: {exc}") from exc

    def _payload(self) -> typing.List[bytes]:
        self.done = True
        payload = b"".join(self._inflated)
        self._inflated = []
        if payload != _TERMINATOR and not payload.endswith(_BLOCK_END):
            raise NNTPDecompressionError(
                "Inflated payload lacks the multi-line terminator"
            )
        return [payload]


class ResponseAssembler(Stage):
    def __init__(self, multiline: bool) -> None:
        super().__init__()
        self.multiline = multiline
        self._response: typing.Optional[Response] = None
        self._lines: typing.List[str] = []

    def feed(self, chunk: str) -> typing.List[Response]:
        if self._response is None:
            self._response = parse_status_line(chunk)
            if not self.multiline:
                self.done = True
                return [self._response]
            return []
        self._lines.append(chunk)
        return []

    def finish(self) -> typing.List[Response]:
        self.done = True
        if self._response is None:
            return []
        return [self._response._replace(lines=tuple(self._lines))]


class ResponsePipeline:
    """A disposable chain of stages that turns the raw bytes of one reply
    into one Response.
    """

    def __init__(self, stages: typing.List[Stage]) -> None:
        self.stages = stages
        self.response: typing.Optional[Response] = None

    @classmethod
    def build(
        cls, multiline: bool, compressed: bool, stray_terminator: bool = False
    ) -> "ResponsePipeline":
        stages: typing.List[Stage] = []
        if stray_terminator:
            stages.append(StrayTerminatorStage())
        if compressed:
            stages.append(DecompressionStage())
        if multiline:
            stages.append(MultilineStage())
        else:
            stages.append(StatusLineStage())
        stages.append(ResponseAssembler(multiline))
        return cls(stages)

    @property
    def trailer_pending(self) -> bool:
        """True when a compressed reply ended without its clear-text
        terminator, which may then open the next reply.
        """
        return any(
            isinstance(stage, DecompressionStage) and stage.trailer_pending
            for stage in self.stages
        )

    @property
    def done(self) -> bool:
        return self.stages[-1].done

    def feed(self, chunk: bytes) -> None:
        self._push([chunk], ended=False)

    def close(self) -> None:
        """Signal end of input. Raises if the reply is still incomplete."""
        self._push([], ended=True)
        if self.response is None:
            raise NNTPTransportError("Connection closed before response completed")

    def _push(self, items: typing.List[typing.Any], ended: bool) -> None:
        for stage in self.stages:
            out: typing.List[typing.Any] = []
            for item in items:
                if stage.done:
                    break
                out += stage.feed(item)
            if ended and not stage.done:
                out += stage.finish()
            ended = stage.done
            items = out
        for item in items:
            self.response = item


class OverviewField(typing.NamedTuple):
    name: str
    full: bool = False


OverviewFormat = typing.List[OverviewField]
MessageOverview = typing.Dict[str, str]


def parse_overview_format(lines: typing.Iterable[str]) -> OverviewFormat:
    fmt: OverviewFormat = []
    for line in lines:
        line = line.strip()
        if not line:
            continue
        if line[-5:].casefold() == ":full":
            fmt.append(OverviewField(line[:-5].casefold(), True))
        elif line.endswith(":"):
            fmt.append(OverviewField(line[:-1].casefold(), False))
        else:
            # metadata items such as ":bytes" have no trailing colon
            fmt.append(OverviewField(line.casefold(), False))
    return fmt


DEFAULT_OVERVIEW_FORMAT = parse_overview_format(_DEFAULT_OVERVIEW_FMT)


def with_number_field(fmt: typing.Iterable[OverviewField]) -> OverviewFormat:
    fields = list(fmt)
    full = any(f.full for f in fields if f.name == "number")
    return [OverviewField("number", full)] + [f for f in fields if f.name != "number"]


def parse_overview_line(line: str, fmt: OverviewFormat) -> MessageOverview:
    parts = line.split("\t")
    overview: MessageOverview = {}
    for i, field in enumerate(fmt):
        part = parts[i] if i < len(parts) else ""
        if field.full:
            part = part[part.find(":") + 1 :].strip()
        overview[field.name] = part
    return overview


class ActiveGroup(typing.NamedTuple):
    name: str
    high: int
    low: int
    count: typing.Optional[int] = None
    posting: typing.Optional[bool] = None


class MessageLines(typing.NamedTuple):
    headers: typing.List[str]
    body: typing.List[str]


ACTIVE_LINE_RE = re.compile(
    r"^(?P<name>\S+)\s+(?P<high>\d+)\s+(?P<low>\d+)(?:\s+(?P<flag>\S+))?"
)


def parse_active_line(line: str) -> typing.Optional[ActiveGroup]:
    match = ACTIVE_LINE_RE.match(line.strip())
    if not match:
        return None
    return ActiveGroup(
        match.group("name"),
        int(match.group("high")),
        int(match.group("low")),
        posting=match.group("flag") == "y",
    )


def split_article(lines: typing.Iterable[str]) -> MessageLines:
    """Split article lines into folded headers and body at the first blank
    line. A header line starting with a space or tab continues the previous
    header.
    """
    headers: typing.List[str] = []
    body: typing.List[str] = []
    in_body = False
    for line in lines:
        if not in_body and not line.strip():
            in_body = True
        elif in_body:
            body.append(line)
        elif line[:1] in (" ", "\t") and headers:
            headers[-1] += line
        else:
            headers.append(line)
    return MessageLines(headers, body)


class NNTPOptions(typing.NamedTuple):
    host: str = "localhost"
    port: int = NNTP_PORT
    # TLS is not implemented; kept so callers get a clear error
    secure: bool = False
    username: typing.Optional[str] = None
    password: typing.Optional[str] = None

    def validated(self) -> "NNTPOptions":
        if not self.host:
            raise ValueError("host must not be empty")
        if not 0 < self.port < 65536:
            raise ValueError(f"port out of range: {self.port}")
        if self.secure:
            raise ValueError("secure connections are not supported")
        return self


class Transport(abc.ABC):
    """Ordered byte delivery to and from the server."""

    @abc.abstractmethod
    def send(self, data: bytes) -> None:
        ...

    @abc.abstractmethod
    def recv(self) -> bytes:
        """Return the next chunk of bytes, or b"" once the peer closed."""
        ...

    @abc.abstractmethod
    def close(self) -> None:
        """Close the connection and return once the peer confirmed it."""
        ...


class SocketTransport(Transport):
    def __init__(self, sock: socket.socket) -> None:
        self.sock = sock

    @classmethod
    def connect(cls, host: str, port: int) -> "SocketTransport":
        return cls(socket.create_connection((host, port)))

    def send(self, data: bytes) -> None:
        self.sock.sendall(data)

    def recv(self) -> bytes:
        return self.sock.recv(_RECV_SIZE)

    def close(self) -> None:
        try:
            self.sock.shutdown(socket.SHUT_WR)
            while self.sock.recv(_RECV_SIZE):
                pass
        finally:
            self.sock.close()


TransportFactory = typing.Callable[[str, int], Transport]


class NNTPClient:
    """A client for one NNTP connection.

    Commands are sent one at a time: each verb writes its command, then
    reads until its reply is complete before returning.
    """

    def __init__(
        self,
        *,
        transport_factory: typing.Optional[TransportFactory] = None,
        **kwargs: typing.Any,
    ) -> None:
        self.options: NNTPOptions = NNTPOptions(**kwargs).validated()
        self.transport_factory: TransportFactory = (
            transport_factory or SocketTransport.connect
        )
        self.is_connected: bool = False
        self.is_read_only: bool = False
        self._transport: typing.Optional[Transport] = None
        self._overview_format: typing.Optional[OverviewFormat] = None
        self._stray_terminator: bool = False

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise NNTPNotConnected("not connected")
        return self._transport

    def connect(self) -> Response:
        host, port = self.options.host, self.options.port
        if self._transport is not None:
            logger.info("Reconnecting to %s:%d", host, port)
            self._reset_session()
        try:
            self._transport = self.transport_factory(host, port)
        except OSError as exc:
            raise NNTPTransportError(f"Could not connect to {host}:{port}: {exc}") from exc

        try:
            response = self._get_response(False, False)
        except NNTPClientError:
            self._release_transport()
            raise
        if response.status not in (
            NNTPStatus.POSTING_ALLOWED,
            NNTPStatus.POSTING_PROHIBITED,
        ):
            self._release_transport()
            raise NNTPServiceUnavailable(response)
        self.is_connected = True
        self.is_read_only = response.status == NNTPStatus.POSTING_PROHIBITED
        logger.info(
            "Connected to %s:%d%s",
            host,
            port,
            " (read-only)" if self.is_read_only else "",
        )
        return response

    def connect_and_authenticate(self) -> Response:
        """Shorthand for connect() followed by authenticate() when a
        username is configured.
        """
        response = self.connect()
        if not self.options.username:
            return response
        return self.authenticate()

    def disconnect(self) -> None:
        transport = self._require_transport()
        try:
            transport.close()
        except OSError as exc:
            raise NNTPTransportError(f"Error while closing connection: {exc}") from exc
        finally:
            self._transport = None
            self._forget_session_state()
        logger.info("Disconnected from %s:%d", self.options.host, self.options.port)

    def authenticate(self) -> Response:
        if not self.options.username:
            raise NNTPMissingCredential("no username specified")

        response = self.authinfo("USER", self.options.username)

        if response.status == NNTPStatus.PASSWORD_REQUIRED:
            if self.options.password is None:
                raise NNTPMissingCredential("password is required")
            response = self.authinfo("PASS", self.options.password)

        if response.status != NNTPStatus.AUTHENTICATION_ACCEPTED:
            logger.warning(
                "Authentication not accepted: %d %s", response.status, response.message
            )
        return response

    def authinfo(self, kind: str, value: str) -> Response:
        return self._get_response(False, False, f"AUTHINFO {kind} {value}")

    def group(self, name: str) -> ActiveGroup:
        response = self._get_response(False, False, f"GROUP {name}")

        if response.status == NNTPStatus.NO_SUCH_GROUP:
            raise NNTPNoSuchGroup(response)
        if response.status != NNTPStatus.GROUP_SELECTED:
            raise NNTPUnexpectedResponse(response)

        try:
            count, low, high, group_name = response.message.split()[:4]
            return ActiveGroup(group_name, int(high), int(low), count=int(count))
        except ValueError as exc:
            raise NNTPProtocolError(response) from exc

    def article(self, message_id: str) -> MessageLines:
        """Retrieve an article by message-id, or by number in the current
        group.
        """
        response = self._get_response(True, False, f"ARTICLE {message_id}")

        if response.status in (
            NNTPStatus.NO_SUCH_ARTICLE,
            NNTPStatus.NO_SUCH_ARTICLE_NUMBER,
        ):
            raise NNTPNoSuchArticle(response)
        if response.status == NNTPStatus.SYNTAX_ERROR:
            raise NNTPInvalidSyntax(response)
        if response.status != NNTPStatus.ARTICLE_RETRIEVED:
            raise NNTPUnexpectedResponse(response)

        return split_article(response.lines)

    def list_active_groups(self) -> typing.Dict[str, ActiveGroup]:
        response = self._get_response(True, False, "LIST ACTIVE")
        if response.status != NNTPStatus.MULTILINE_FOLLOWS:
            raise NNTPUnexpectedResponse(response)

        groups: typing.Dict[str, ActiveGroup] = {}
        for line in response.lines:
            group = parse_active_line(line)
            if group is not None:
                groups[group.name] = group
        return groups

    def overview_format(self) -> OverviewFormat:
        response = self._get_response(True, False, "LIST OVERVIEW.FMT")
        if response.status == NNTPStatus.MULTILINE_FOLLOWS:
            fmt = parse_overview_format(response.lines)
        else:
            logger.debug(
                "LIST OVERVIEW.FMT not supported (%d), using default format",
                response.status,
            )
            fmt = list(DEFAULT_OVERVIEW_FORMAT)
        self._overview_format = fmt
        return fmt

    def xover(
        self, range_: str, fmt: typing.Optional[OverviewFormat] = None
    ) -> typing.List[MessageOverview]:
        """Older overview extension; RFC 2980 (Oct 2000)"""
        return self._overview("XOVER", range_, fmt, compressed=False)

    def xzver(
        self, range_: str, fmt: typing.Optional[OverviewFormat] = None
    ) -> typing.List[MessageOverview]:
        """Non-standard compressed overview extension; q.v. RFC 8054 (Jan 2017)"""
        return self._overview("XZVER", range_, fmt, compressed=True)

    def _overview(
        self,
        verb: str,
        range_: str,
        fmt: typing.Optional[OverviewFormat],
        compressed: bool,
    ) -> typing.List[MessageOverview]:
        self._require_transport()
        if fmt is None:
            fmt = self._overview_format
            if fmt is None:
                fmt = self.overview_format()
        fmt = with_number_field(fmt)

        response = self._get_response(True, compressed, f"{verb} {range_}")
        if response.status != NNTPStatus.OVERVIEW_FOLLOWS:
            raise NNTPUnexpectedResponse(response)
        return [parse_overview_line(line, fmt) for line in response.lines]

    def _send(self, transport: Transport, command: str) -> None:
        if command.casefold().startswith("authinfo"):
            logger.debug("sending %s", " ".join(command.split()[:2]))
        else:
            logger.debug("sending %s", command)
        try:
            transport.send(command.encode(DEFAULT_ENCODING) + _CRLF)
        except OSError as exc:
            raise NNTPTransportError(f"Could not send command: {exc}") from exc

    def _get_response(
        self, multiline: bool, compressed: bool, command: typing.Optional[str] = None
    ) -> Response:
        transport = self._require_transport()
        pipeline = ResponsePipeline.build(
            multiline, compressed, stray_terminator=self._stray_terminator
        )
        self._stray_terminator = False

        if command is not None:
            self._send(transport, command)

        while not pipeline.done:
            try:
                chunk = transport.recv()
            except OSError as exc:
                raise NNTPTransportError(f"Could not read response: {exc}") from exc
            if not chunk:
                pipeline.close()
                break
            pipeline.feed(chunk)

        self._stray_terminator = pipeline.trailer_pending
        response = typing.cast(Response, pipeline.response)
        logger.debug("got %d %s", response.status, response.message)
        return response

    def _forget_session_state(self) -> None:
        self.is_connected = False
        self.is_read_only = False
        self._overview_format = None
        self._stray_terminator = False

    def _reset_session(self) -> None:
        self._release_transport()
        self._forget_session_state()

    def _release_transport(self) -> None:
        transport, self._transport = self._transport, None
        if transport is not None:
            try:
                transport.close()
            except OSError as exc:
                logger.debug("Error while closing connection: %s", exc)
