"""
Tests for language detection
"""

from airline_assistant.services.language_detector import (
    ENGLISH, HINDI, detect_language, get_language_instructions
)


class TestDetectLanguage:
    """Test English/Hindi detection"""

    def test_empty_text_is_english(self):
        assert detect_language("") == ENGLISH
        assert detect_language("   ") == ENGLISH
        assert detect_language(None) == ENGLISH

    def test_english_text(self):
        assert detect_language("What is the baggage allowance?") == ENGLISH

    def test_devanagari_text(self):
        assert detect_language("सामान की सीमा क्या है?") == HINDI

    def test_romanized_hindi_keywords(self):
        assert detect_language("baggage allowance kya hai") == HINDI
        assert detect_language("Namaste, batao check-in kaise kare") == HINDI

    def test_keyword_must_be_whole_word(self):
        # "hai" inside another word is not a keyword
        assert detect_language("Flights to Shanghai please") == ENGLISH


class TestLanguageInstructions:
    """Test prompt instructions per language"""

    def test_english_instructions(self):
        info = get_language_instructions(ENGLISH)
        assert info.response_language == "English"
        assert "English" in info.instruction

    def test_hindi_instructions(self):
        info = get_language_instructions(HINDI)
        assert info.language == HINDI
        assert info.response_language == "Hindi"
        assert "हिंदी" in info.instruction

    def test_unknown_language_falls_back_to_english(self):
        assert get_language_instructions("fr").response_language == "English"
