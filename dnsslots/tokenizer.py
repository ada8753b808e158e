from typing import List

SEPARATORS = ('.', '-')


def tokenize(domain: str) -> List[str]:
    """Split a domain on "." and "-", keeping each separator as its own token.

    >>> tokenize("eu-east-1.example.com")
    ['eu', '-', 'east', '-', '1', '.', 'example', '.', 'com']
    """
    tokens = []
    prev = 0
    for idx, c in enumerate(domain):
        if c in SEPARATORS:
            tokens.append(domain[prev:idx])
            tokens.append(c)
            prev = idx + 1
    # final segment (example."com")
    tokens.append(domain[prev:])
    return tokens


def join(tokens: List[str]) -> str:
    return ''.join(tokens)
