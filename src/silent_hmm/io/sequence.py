"""
Symbol sequence parsing and validation.

Sequences are either character strings (each character is one symbol) or
delimited token strings. Sequence files hold one sequence per line; a line
starting with ``>`` names the sequence that follows it.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from ..config import get_config
from ..exceptions import InvalidSymbolError, SequenceFormatError
from ..hmm.model import HMM
from ..logger import get_logger

logger = get_logger(__name__)


def parse_sequence(text: str, delimiter: Optional[str] = None) -> Tuple[str, ...]:
    """
    Split a line of text into symbols.

    Args:
        text: Raw sequence text
        delimiter: Token separator; ``None`` treats every character as a symbol,
            ``" "`` splits on any whitespace

    Returns:
        Tuple of symbols
    """
    text = text.strip()
    if delimiter is None:
        return tuple(text)
    if delimiter == " ":
        return tuple(text.split())
    return tuple(token.strip() for token in text.split(delimiter) if token.strip())


def read_sequences(path: Union[str, Path],
                   delimiter: Optional[str] = None,
                   comment_prefix: Optional[str] = None) -> List[Tuple[str, Tuple[str, ...]]]:
    """
    Read named sequences from a text file.

    Args:
        path: Sequence file
        delimiter: Token separator passed to :func:`parse_sequence`
        comment_prefix: Lines starting with this prefix are skipped
            (default from config ``io.comment_prefix``)

    Returns:
        List of ``(name, symbols)`` pairs in file order

    Raises:
        SequenceFormatError: If the file cannot be read or a header has no sequence
    """
    path = Path(path)
    if comment_prefix is None:
        comment_prefix = get_config('io', 'comment_prefix')
    encoding = get_config('io', 'encoding') or 'utf-8'

    if not path.exists():
        raise SequenceFormatError(f"Sequence file not found: {path}")

    try:
        lines = path.read_text(encoding=encoding).splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise SequenceFormatError(f"Failed to read sequence file {path}: {str(e)}")

    sequences = []
    pending_name = None
    for line_no, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or (comment_prefix and stripped.startswith(comment_prefix)):
            continue
        if stripped.startswith('>'):
            if pending_name is not None:
                raise SequenceFormatError(
                    f"{path}:{line_no}: header {pending_name!r} has no sequence")
            pending_name = stripped[1:].strip() or f"seq{len(sequences) + 1}"
            continue
        name = pending_name or f"seq{len(sequences) + 1}"
        sequences.append((name, parse_sequence(stripped, delimiter)))
        pending_name = None

    if pending_name is not None:
        raise SequenceFormatError(f"{path}: header {pending_name!r} has no sequence")

    logger.debug(f"Read {len(sequences)} sequences from {path}")
    return sequences


def validate_sequence(model: HMM, sequence: Sequence[str]) -> None:
    """
    Check that every symbol lies in the model's alphabet.

    Raises:
        InvalidSymbolError: For the first symbol outside the alphabet
    """
    alphabet = model.alphabet
    for position, symbol in enumerate(sequence):
        if symbol not in alphabet:
            raise InvalidSymbolError(symbol, position)
