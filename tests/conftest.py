"""Shared fixtures: a small five-chapter catalog and in-memory stores."""

import pytest

from guidedbook.classroom import (
    CursorStore,
    MemoryStorage,
    Navigator,
    ProgressStore,
    parse_catalog,
)


CATALOG_DATA = {
    "title": "Livro de Teste",
    "subtitle": "Capítulos curtos",
    "chapters": [
        {
            "id": "intro",
            "title": "Introdução",
            "image_prompt": "An open door in a nebula",
            "blocks": [
                {"type": "quote", "content": "Comece pelo começo."},
                {"type": "text", "content": "Sem exercícios aqui."},
            ],
        },
        {
            "id": "ch-1",
            "title": "Capítulo 1",
            "blocks": [
                {"type": "text", "content": "Escreva uma frase."},
                {"type": "exercise", "id": "e1", "label": "Sua frase", "placeholder": "..."},
            ],
        },
        {
            "id": "ch-2",
            "title": "Capítulo 2",
            "blocks": [
                {
                    "type": "input_list",
                    "id": "il",
                    "label": "Três respostas",
                    "prompts": ["Primeira", "Segunda", "Terceira"],
                },
                {"type": "exercise", "id": "notes", "label": "Notas", "is_optional": True},
            ],
        },
        {
            "id": "ch-3",
            "title": "Capítulo 3",
            "blocks": [
                {
                    "type": "checklist",
                    "id": "ck",
                    "label": "Escolha técnicas",
                    "options": ["A", "B", "C", "D"],
                    "min_selections": 2,
                    "max_selections": 3,
                },
            ],
        },
        {
            "id": "ch-4",
            "title": "Capítulo 4",
            "subtitle": "Final",
            "blocks": [
                {"type": "exercise", "id": "e4", "label": "Última reflexão"},
            ],
        },
    ],
}


def complete_through(progress: ProgressStore, last_chapter: int):
    """Answer every required block up to and including a chapter index."""
    answers = [
        {},
        {"e1": "uma frase"},
        {"il_0": "um", "il_1": "dois", "il_2": "três"},
        {"ck": ["A", "B"]},
        {"e4": "fim"},
    ]
    for chapter_answers in answers[:last_chapter + 1]:
        for key, value in chapter_answers.items():
            progress.set(key, value)


@pytest.fixture
def catalog():
    return parse_catalog(CATALOG_DATA)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def progress(storage):
    return ProgressStore(storage)


@pytest.fixture
def cursor(storage):
    return CursorStore(storage)


@pytest.fixture
def navigator(catalog, progress, cursor):
    return Navigator(catalog, progress, cursor)
