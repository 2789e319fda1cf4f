#!/usr/bin/env python3
"""
Omni Decoder - recursive layer unwrapper
Identifies and decodes Binary, Hex, URL, Base32 and Base64 encoded
strings layer by layer until plaintext (or a binary payload) is revealed.

Each pass classifies the current string with a fixed priority list,
decodes exactly one layer and feeds the result back in. The run stops
when nothing matches, the output is binary, or the depth bound is hit.
MIT License
"""

import argparse
import base64
import binascii
import logging
import re
import sys
import urllib.parse
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from colorama import Fore, Style, just_fix_windows_console

# ===========================================================
# GLOBAL SETTINGS
# ===========================================================
MAX_DEPTH = 10
MAX_PREVIEW = 200
MAX_INPUT_SIZE = 100 * 1024 * 1024

LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s:%(lineno)s] %(message)s"
LOG_DATE_FMT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)

# ===========================================================
# Data Classes
# ===========================================================
class Encoding(Enum):
    BINARY = "Binary (Base2)"
    HEX = "Hex (Base16)"
    URL = "URL Encoding"
    BASE32 = "Base32"
    BASE64 = "Base64"
    UNKNOWN = "Unknown"


class Terminal(Enum):
    RUNNING = "running"
    STOPPED_UNKNOWN = "stopped-unknown"
    STOPPED_BINARY = "stopped-binary"
    STOPPED_MAX_DEPTH = "stopped-max-depth"


@dataclass
class DecodeOutcome:
    method: Encoding
    data: Optional[bytes]
    success: bool = True
    error: Optional[str] = None


@dataclass
class Layer:
    depth: int
    label: Encoding
    data: bytes

    @property
    def text(self) -> str:
        # layers only ever hold printable ASCII
        return self.data.decode("ascii")


@dataclass
class EngineState:
    current: str
    depth: int = 0
    layers: List[Layer] = field(default_factory=list)
    terminal: Terminal = Terminal.RUNNING
    payload: Optional[bytes] = None
    payload_label: Optional[Encoding] = None


@dataclass
class RunResult:
    terminal: Terminal
    content: Union[str, bytes]
    layers: List[Layer]
    payload_label: Optional[Encoding] = None

    @property
    def is_binary(self) -> bool:
        return self.terminal is Terminal.STOPPED_BINARY

# ===========================================================
# Utility Functions
# ===========================================================
def debug(msg: str) -> None:
    logger.debug(msg)

def setup_logging(debug_mode: bool = False) -> None:
    level = logging.DEBUG if debug_mode else logging.WARNING
    logging.basicConfig(format=LOG_FORMAT, datefmt=LOG_DATE_FMT, stream=sys.stderr)
    logging.getLogger().setLevel(level)

def to_bytes_safe(x: Union[str, bytes], encoding: str = "utf-8") -> bytes:
    """Convert str->bytes, leaving bytes untouched."""
    if isinstance(x, bytes):
        return x
    return x.encode(encoding, errors="surrogatepass")

def strip_whitespace(s: str) -> str:
    return "".join(s.split())

PRINTABLE_CONTROLS = frozenset(b"\t\n\r")

def is_printable_bytes(b: bytes) -> bool:
    """True when every byte is printable ASCII (0x20-0x7E) or tab/LF/CR.

    Multi-byte UTF-8 text fails this check and is reported as binary.
    """
    return all(0x20 <= c <= 0x7E or c in PRINTABLE_CONTROLS for c in b)

# ===========================================================
# Classification
# ===========================================================
BINARY_RE = re.compile(r"[01]+")
HEX_RE = re.compile(r"[0-9a-fA-F]+")
BASE32_RE = re.compile(r"[A-Z2-7]+=*")
BASE64_RE = re.compile(r"[A-Za-z0-9+/]+=*")

# Every rule receives (raw, stripped). Only the URL rule looks at raw
# input, so whitespace around %XX escapes is left alone.
def _rule_binary(raw: str, stripped: str) -> bool:
    return BINARY_RE.fullmatch(stripped) is not None and len(stripped) % 8 == 0

def _rule_hex(raw: str, stripped: str) -> bool:
    return HEX_RE.fullmatch(stripped) is not None and len(stripped) % 2 == 0

def _rule_url(raw: str, stripped: str) -> bool:
    return "%" in raw

def _rule_base32(raw: str, stripped: str) -> bool:
    return BASE32_RE.fullmatch(stripped) is not None

def _rule_base64(raw: str, stripped: str) -> bool:
    return BASE64_RE.fullmatch(stripped) is not None and len(stripped) % 4 == 0

# The alphabets overlap (binary digits < hex digits < base64 alphabet), so
# the most restrictive interpretation is tried first. First match wins.
CLASSIFICATION_PRIORITY: Tuple[Tuple[Encoding, Callable[[str, str], bool]], ...] = (
    (Encoding.BINARY, _rule_binary),
    (Encoding.HEX, _rule_hex),
    (Encoding.URL, _rule_url),
    (Encoding.BASE32, _rule_base32),
    (Encoding.BASE64, _rule_base64),
)

def classify(raw: str) -> Encoding:
    """Return the most likely encoding of raw, or Encoding.UNKNOWN."""
    stripped = strip_whitespace(raw)
    for encoding, rule in CLASSIFICATION_PRIORITY:
        if rule(raw, stripped):
            return encoding
    return Encoding.UNKNOWN

# ===========================================================
# Decoder return normalization helper
# ===========================================================
def normalize_decoder_return(func: Callable[[str], bytes]) -> Callable[[str], Optional[bytes]]:
    """
    Wrap a decoder that raises on bad input into one that returns bytes or None.
    ValueError covers binascii.Error and UnicodeError; the reason is logged.
    """
    def wrapped(data: str) -> Optional[bytes]:
        try:
            return func(data)
        except (ValueError, TypeError) as e:
            debug(f"{func.__name__} failed: {e}")
            return None
    wrapped.__name__ = func.__name__
    return wrapped

# ===========================================================
# DECODERS (return bytes, raise ValueError on bad input)
# ===========================================================
def decode_binary(s: str) -> bytes:
    cleaned = strip_whitespace(s)
    if len(cleaned) % 8 != 0:
        raise ValueError(f"length {len(cleaned)} is not a multiple of 8")
    result = bytearray()
    for i in range(0, len(cleaned), 8):
        chunk = cleaned[i:i + 8]
        if not BINARY_RE.fullmatch(chunk):
            raise ValueError(f"bad chunk {chunk!r}")
        result.append(int(chunk, 2))
    return bytes(result)

def decode_base16(s: str) -> bytes:
    return binascii.unhexlify(strip_whitespace(s))

def decode_url(s: str) -> bytes:
    """Percent-decode %XX triplets; malformed escapes pass through unchanged."""
    return urllib.parse.unquote_to_bytes(s)

def decode_base32(s: str) -> bytes:
    # strict: RFC 4648 alphabet and padding, no case folding
    return base64.b32decode(strip_whitespace(s))

def decode_base64(s: str) -> bytes:
    return base64.b64decode(strip_whitespace(s), validate=True)

# ===========================================================
# Decoder Registry (wrapped so bad input yields None)
# ===========================================================
DECODERS: Dict[Encoding, Callable[[str], Optional[bytes]]] = {
    Encoding.BINARY: normalize_decoder_return(decode_binary),
    Encoding.HEX: normalize_decoder_return(decode_base16),
    Encoding.URL: normalize_decoder_return(decode_url),
    Encoding.BASE32: normalize_decoder_return(decode_base32),
    Encoding.BASE64: normalize_decoder_return(decode_base64),
}

def decode(data: str) -> DecodeOutcome:
    """
    Decode one layer of data.

    The scheme is re-derived with classify(), so the applied decoder always
    agrees with the reported label. A result is only a success when it is
    non-empty and differs from the input byte for byte.
    """
    method = classify(data)
    func = DECODERS.get(method)
    if func is None:
        return DecodeOutcome(method, None, success=False, error="No matching encoding")

    decoded = func(data)
    if decoded is None:
        return DecodeOutcome(method, None, success=False, error=f"{method.value} decode failed")
    if not decoded:
        return DecodeOutcome(method, None, success=False, error=f"{method.value} decoded to nothing")
    if decoded == to_bytes_safe(data):
        return DecodeOutcome(method, None, success=False, error=f"{method.value} decode left input unchanged")
    return DecodeOutcome(method, decoded)

# ===========================================================
# Recursion Engine
# ===========================================================
def step(state: EngineState, max_depth: int = MAX_DEPTH,
         on_layer: Optional[Callable[[Layer], None]] = None) -> EngineState:
    """Advance state by one classify/decode attempt."""
    if state.terminal is not Terminal.RUNNING:
        return state

    label = classify(state.current)
    outcome = decode(state.current)
    if not outcome.success:
        debug(f"depth {state.depth}: {outcome.error}")
        state.terminal = Terminal.STOPPED_UNKNOWN
        return state

    if not is_printable_bytes(outcome.data):
        debug(f"depth {state.depth}: {label.value} produced {len(outcome.data)} bytes of binary data")
        state.payload = outcome.data
        state.payload_label = label
        state.terminal = Terminal.STOPPED_BINARY
        return state

    layer = Layer(state.depth + 1, label, outcome.data)
    state.layers.append(layer)
    state.current = layer.text
    state.depth = layer.depth
    debug(f"depth {layer.depth}: decoded {label.value}")
    if on_layer is not None:
        on_layer(layer)

    if state.depth >= max_depth:
        state.terminal = Terminal.STOPPED_MAX_DEPTH
    return state

def recursive_decode(data: str, max_depth: int = MAX_DEPTH,
                     on_layer: Optional[Callable[[Layer], None]] = None) -> RunResult:
    """
    Peel encodings off data until no decode applies, the output turns
    binary or max_depth layers have been removed.

    on_layer is called with every layer as soon as it is decoded.
    """
    if max_depth < 1:
        raise ValueError(f"max_depth must be at least 1, got {max_depth}")

    state = EngineState(current=data)
    while state.terminal is Terminal.RUNNING:
        step(state, max_depth, on_layer)
    debug(f"stopped after {state.depth} layer(s): {state.terminal.value}")

    if state.terminal is Terminal.STOPPED_BINARY:
        return RunResult(state.terminal, state.payload, state.layers, state.payload_label)
    return RunResult(state.terminal, state.current, state.layers)

# ===========================================================
# Presentation
# ===========================================================
SEPARATOR = "-" * 51

def colorize(text: str, color: str, enabled: bool = True) -> str:
    if not enabled:
        return text
    return f"{color}{text}{Style.RESET_ALL}"

def format_preview(text: str, limit: int = MAX_PREVIEW) -> str:
    if len(text) > limit:
        return text[:limit] + "..."
    return text

def format_hexdump(data: bytes, width: int = 16) -> str:
    lines: List[str] = []
    for offset in range(0, len(data), width):
        chunk = data[offset:offset + width]
        hex_part = " ".join(f"{byte:02x}" for byte in chunk)
        ascii_part = "".join(chr(byte) if 32 <= byte < 127 else "." for byte in chunk)
        lines.append(f"{offset:08x}  {hex_part:<{width * 3}}  {ascii_part}")
    return "\n".join(lines)

def format_banner(color: bool = True) -> str:
    return colorize("[*] Starting Recursive Analysis...", Fore.BLUE, color) + "\n" + SEPARATOR

def format_layer(layer: Layer, preview: int = MAX_PREVIEW, color: bool = True) -> str:
    header = colorize(f"Layer {layer.depth} ({layer.label.value}):", Fore.CYAN, color)
    return "\n".join([header, format_preview(layer.text, preview), SEPARATOR])

def format_result(result: RunResult, max_depth: int = MAX_DEPTH, color: bool = True) -> str:
    if result.terminal is Terminal.STOPPED_BINARY:
        label = result.payload_label.value if result.payload_label else Encoding.UNKNOWN.value
        header = colorize(f"Layer {len(result.layers) + 1} ({label}):", Fore.CYAN, color)
        return "\n".join([
            f"{header} Decoded to Binary/Shellcode",
            colorize("[!] Binary output detected. Stopping recursion.", Fore.RED, color),
            colorize("[*] Final Payload Hex Dump:", Fore.BLUE, color),
            format_hexdump(result.content),
        ])
    if result.terminal is Terminal.STOPPED_MAX_DEPTH:
        return colorize(f"[!] Maximum depth ({max_depth}) reached. Stopping recursion.", Fore.YELLOW + Style.BRIGHT, color)
    return colorize("[V] End of line reached (Plaintext or Unknown format).", Fore.GREEN, color)

# ===========================================================
# Input
# ===========================================================
def read_input(args: argparse.Namespace) -> str:
    if args.file:
        with open(args.file, "r", encoding="utf-8", newline="") as f:
            input_data = f.read().rstrip("\n")
    else:
        input_data = args.input or ""
    if len(input_data) > MAX_INPUT_SIZE:
        raise ValueError(f"Input too large: {len(input_data)} characters (max: {MAX_INPUT_SIZE})")
    return input_data

# ===========================================================
# Main Entry Point
# ===========================================================
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="omni-decoder",
        description="Recursively decode Binary, Hex, URL, Base32 and Base64 layers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("input", nargs="?", help="Input string to decode")
    parser.add_argument("-f", "--file", help="Read input from file")
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug output")
    parser.add_argument("-p", "--preview", type=int, default=MAX_PREVIEW,
                        help=f"Preview length (default: {MAX_PREVIEW})")
    parser.add_argument("--max-depth", type=int, default=MAX_DEPTH,
                        help=f"Maximum number of layers to decode (default: {MAX_DEPTH})")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    return parser

def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.debug)
    if args.max_depth < 1:
        parser.error("--max-depth must be at least 1")
    if args.preview < 1:
        parser.error("--preview must be positive")

    color = not args.no_color
    if color:
        just_fix_windows_console()

    if not args.input and not args.file:
        print(f"{colorize('Usage:', Fore.BLUE, color)} {parser.prog} <string> OR {parser.prog} -f <file>")
        return 1
    try:
        input_data = read_input(args)
    except OSError as e:
        print(colorize(f"Error reading file: {e}", Fore.RED, color), file=sys.stderr)
        return 1
    except ValueError as e:
        print(colorize(f"Error: {e}", Fore.RED, color), file=sys.stderr)
        return 1
    if not input_data:
        print("Error: No input provided", file=sys.stderr)
        return 1

    print(format_banner(color))
    result = recursive_decode(
        input_data,
        max_depth=args.max_depth,
        on_layer=lambda layer: print(format_layer(layer, args.preview, color)),
    )
    print(format_result(result, args.max_depth, color))
    return 0

def cli() -> None:
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        if logger.isEnabledFor(logging.DEBUG):
            raise
        sys.exit(1)

if __name__ == "__main__":
    cli()
