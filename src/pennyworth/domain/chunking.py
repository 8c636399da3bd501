"""Fatiamento de respostas longas em mensagens do tamanho do WhatsApp.

Função pura: mesma entrada, mesma saída.
"""

from __future__ import annotations

import re

DEFAULT_CHUNK_LIMIT = 300

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
# Terminador só fecha sentença antes de espaço ou do fim: "example.com" e "3.5" ficam inteiros.
_SENTENCE = re.compile(r".+?(?:[.!?]+(?=\s|$)|$)")


def split_sentences(text: str) -> list[str]:
    """Quebra o texto em sentenças aparadas, atravessando parágrafos e linhas."""
    sentences: list[str] = []
    for paragraph in _PARAGRAPH_BREAK.split(text):
        for line in paragraph.splitlines():
            for match in _SENTENCE.finditer(line):
                sentence = match.group(0).strip()
                if sentence:
                    sentences.append(sentence)
    return sentences


def split_by_sentences(text: str, limit: int = DEFAULT_CHUNK_LIMIT) -> list[str]:
    """Agrupa sentenças em chunks de até `limit` caracteres (empacotamento guloso).

    Uma sentença maior que o limite vira um chunk sozinha, sem truncamento.
    O resultado nunca é vazio: texto em branco vira um único chunk vazio.
    """
    chunks: list[str] = []
    current = ""

    for sentence in split_sentences(text):
        if not current:
            current = sentence
            continue
        candidate = f"{current} {sentence}"
        if len(candidate) > limit:
            chunks.append(current)
            current = sentence
        else:
            current = candidate

    chunks.append(current)
    return chunks
