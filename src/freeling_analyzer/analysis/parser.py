from __future__ import annotations

from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

TOKEN_FIELDS = ("form", "lemma", "tag", "prob")


class Token(Mapping[str, Any]):
    """One analyzed word.

    Only the fields present in the analyzer line exist on the token: a token
    without a probability has no ``prob`` attribute and no ``"prob"`` key.
    """

    __slots__ = ("_fields",)

    def __init__(self, *, form: str, **fields: Any) -> None:
        if form is None:
            raise TypeError("a token needs a form")
        unknown = set(fields) - set(TOKEN_FIELDS)
        if unknown:
            raise TypeError(f"unexpected token field(s): {', '.join(sorted(unknown))}")
        fields["form"] = form
        values = {name: fields.get(name) for name in TOKEN_FIELDS}
        object.__setattr__(self, "_fields", {k: v for k, v in values.items() if v is not None})

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._fields[name]
        except KeyError:
            raise AttributeError(name) from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Token is immutable")

    def __reduce__(self):
        return (_rebuild_token, (self.to_dict(),))

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __hash__(self) -> int:
        return hash(frozenset(self._fields.items()))

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v!r}" for k, v in self._fields.items())
        return f"Token({inner})"

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._fields)


def _rebuild_token(fields: Dict[str, Any]) -> Token:
    return Token(**fields)


class SentenceBoundary:
    """Marker for the blank line the analyzer emits after each sentence."""

    _instance: Optional["SentenceBoundary"] = None

    def __new__(cls) -> "SentenceBoundary":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SENTENCE_BOUNDARY"


SENTENCE_BOUNDARY = SentenceBoundary()

Sentence = Tuple[Token, ...]
ParsedLine = Union[Token, SentenceBoundary]


def format_token(token: Token, *, sep: str = "\t") -> str:
    """Render a token back into analyzer column order, skipping absent fields."""

    return sep.join(str(token[name]) for name in TOKEN_FIELDS if name in token)


def _parse_prob(raw: Optional[str]) -> Optional[float]:
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def parse_line(line: str) -> ParsedLine:
    """Turn one analyzer output line into a Token or SENTENCE_BOUNDARY."""

    fields = line.split()
    if not fields:
        return SENTENCE_BOUNDARY

    form, lemma, tag, prob = (fields[:4] + [None] * 4)[:4]
    return Token(form=form, lemma=lemma, tag=tag, prob=_parse_prob(prob))
