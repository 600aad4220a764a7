import pytest

from core.exceptions import WordExtractionError
from utils.word_extractor import extract_text, extract_words, tokenize_text


def test_tokenize_lowercases_and_dedupes_in_order():
    text = "Cat, dog\nFish cat DOG don't well-known 42"
    assert tokenize_text(text) == ['cat', 'dog', 'fish', "don't", 'well-known']


def test_tokenize_empty():
    assert tokenize_text('') == []
    assert tokenize_text('123 !!! ---') == []


@pytest.mark.parametrize('filename', ['words.txt', 'WORDS.MD', 'list.csv', 'notes.markdown'])
def test_text_formats(filename):
    assert extract_words(filename, b'apple,banana\ncherry') == ['apple', 'banana', 'cherry']


def test_utf8_bom_is_stripped():
    assert extract_text('words.txt', '﻿apple'.encode('utf-8')) == 'apple'


def test_unsupported_extension():
    with pytest.raises(WordExtractionError, match='Invalid file type'):
        extract_words('words.docx', b'apple')


def test_undecodable_text():
    with pytest.raises(WordExtractionError):
        extract_words('words.txt', b'\xff\xfe\xfa')


def test_pdf_header_checked():
    with pytest.raises(WordExtractionError, match='Invalid PDF'):
        extract_words('words.pdf', b'not a pdf')
