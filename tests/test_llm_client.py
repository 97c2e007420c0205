"""Unit tests for LLMClient."""
import sys
sys.path.insert(0, 'backend')

import pytest
from unittest.mock import Mock, patch
from services.llm_client import LLMClient, LLMResponse, LLMClientError
from groq import RateLimitError, AuthenticationError, APIError, APITimeoutError


def _completion(text, prompt_tokens=100, completion_tokens=10):
    response = Mock()
    response.choices = [Mock(message=Mock(content=text))]
    response.usage = Mock(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens)
    return response


class TestLLMClient:
    """Test suite for LLMClient class."""

    @patch('services.llm_client.Groq')
    def test_initialization_with_api_key(self, mock_groq_class):
        """Test LLMClient initializes with provided API key."""
        client = LLMClient(api_key="test_key")
        assert client.api_key == "test_key"

    @patch('services.llm_client.Groq')
    def test_initialization_configures_timeout_without_sdk_retries(self, mock_groq_class):
        """The SDK must not retry on its own; callers own the retry budget."""
        LLMClient(api_key="test_key", timeout=12)

        mock_groq_class.assert_called_once_with(api_key="test_key", timeout=12, max_retries=0)

    def test_initialization_without_api_key_raises_error(self):
        """Test LLMClient raises error when no API key provided."""
        with patch('services.llm_client.GROQ_API_KEY', None):
            with pytest.raises(ValueError, match="GROQ_API_KEY must be provided"):
                LLMClient()

    @patch('services.llm_client.Groq')
    def test_generate_success(self, mock_groq_class):
        """Test successful response generation."""
        mock_client = Mock()
        mock_client.chat.completions.create.return_value = _completion(
            "  Thanks for your message, Sarah!  ", prompt_tokens=150, completion_tokens=12
        )
        mock_groq_class.return_value = mock_client

        client = LLMClient(api_key="test_key")
        response = client.generate(
            model="llama-3.1-8b-instant",
            prompt="Reply to the recruiter"
        )

        assert isinstance(response, LLMResponse)
        assert response.text == "Thanks for your message, Sarah!"
        assert response.tokens_input == 150
        assert response.tokens_output == 12
        assert response.model_used == "llama-3.1-8b-instant"
        assert isinstance(response.latency_ms, int)
        assert response.latency_ms >= 0

    @patch('services.llm_client.Groq')
    def test_generate_passes_sampling_parameters(self, mock_groq_class):
        mock_client = Mock()
        mock_client.chat.completions.create.return_value = _completion("Answer")
        mock_groq_class.return_value = mock_client

        client = LLMClient(api_key="test_key")
        client.generate(model="llama-3.3-70b-versatile", prompt="Prompt", max_tokens=800, temperature=0.5)

        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "llama-3.3-70b-versatile"
        assert kwargs["messages"] == [{"role": "user", "content": "Prompt"}]
        assert kwargs["max_tokens"] == 800
        assert kwargs["temperature"] == 0.5
        assert "response_format" not in kwargs

    @patch('services.llm_client.Groq')
    def test_generate_json_mode_requests_json_object(self, mock_groq_class):
        mock_client = Mock()
        mock_client.chat.completions.create.return_value = _completion('{"language": "nl"}')
        mock_groq_class.return_value = mock_client

        client = LLMClient(api_key="test_key")
        response = client.generate(model="llama-3.1-8b-instant", prompt="Detect", json_mode=True)

        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert response.text == '{"language": "nl"}'

    @patch('services.llm_client.Groq')
    def test_generate_empty_completion_raises(self, mock_groq_class):
        mock_client = Mock()
        mock_client.chat.completions.create.return_value = _completion("   ")
        mock_groq_class.return_value = mock_client

        client = LLMClient(api_key="test_key")

        with pytest.raises(LLMClientError) as exc_info:
            client.generate(model="llama-3.1-8b-instant", prompt="Test prompt")

        assert exc_info.value.error.code == "EMPTY_RESPONSE"

    @patch('services.llm_client.Groq')
    def test_generate_handles_unexpected_error(self, mock_groq_class):
        """Test that unexpected errors are properly raised with structured error."""
        mock_client = Mock()
        mock_client.chat.completions.create.side_effect = Exception("API Error")
        mock_groq_class.return_value = mock_client

        client = LLMClient(api_key="test_key")

        with pytest.raises(LLMClientError) as exc_info:
            client.generate(
                model="llama-3.1-8b-instant",
                prompt="Test prompt"
            )

        error = exc_info.value.error
        assert error.code == "UNKNOWN_ERROR"
        assert "Unexpected error" in error.message
        assert error.details["model"] == "llama-3.1-8b-instant"
        assert error.details["error_type"] == "Exception"

    @patch('services.llm_client.Groq')
    def test_generate_handles_rate_limit_error(self, mock_groq_class):
        """Test that rate limit errors are handled with retry suggestion."""
        mock_client = Mock()
        mock_client.chat.completions.create.side_effect = RateLimitError(
            message="Rate limit exceeded",
            response=Mock(status_code=429),
            body=None
        )
        mock_groq_class.return_value = mock_client

        client = LLMClient(api_key="test_key")

        with pytest.raises(LLMClientError) as exc_info:
            client.generate(
                model="llama-3.1-8b-instant",
                prompt="Test prompt"
            )

        error = exc_info.value.error
        assert error.code == "RATE_LIMIT_ERROR"
        assert "Rate limit exceeded" in error.message
        assert error.details["retry_after"] == 60
        assert error.details["model"] == "llama-3.1-8b-instant"
        assert isinstance(error.details["latency_ms"], int)

    @patch('services.llm_client.Groq')
    def test_generate_handles_authentication_error(self, mock_groq_class):
        """Test that authentication errors are handled properly."""
        mock_client = Mock()
        mock_client.chat.completions.create.side_effect = AuthenticationError(
            message="Invalid API key",
            response=Mock(status_code=401),
            body=None
        )
        mock_groq_class.return_value = mock_client

        client = LLMClient(api_key="test_key")

        with pytest.raises(LLMClientError) as exc_info:
            client.generate(
                model="llama-3.1-8b-instant",
                prompt="Test prompt"
            )

        error = exc_info.value.error
        assert error.code == "AUTHENTICATION_ERROR"
        assert "Authentication failed" in error.message

    @patch('services.llm_client.Groq')
    def test_generate_handles_timeout_error(self, mock_groq_class):
        """Test that timeout errors are handled properly."""
        mock_client = Mock()
        mock_client.chat.completions.create.side_effect = APITimeoutError(request=Mock())
        mock_groq_class.return_value = mock_client

        client = LLMClient(api_key="test_key")

        with pytest.raises(LLMClientError) as exc_info:
            client.generate(
                model="llama-3.1-8b-instant",
                prompt="Test prompt"
            )

        error = exc_info.value.error
        assert error.code == "TIMEOUT_ERROR"
        assert "timed out" in error.message

    @patch('services.llm_client.Groq')
    def test_generate_handles_generic_api_error(self, mock_groq_class):
        """Test that generic API errors are handled properly."""
        mock_client = Mock()
        mock_client.chat.completions.create.side_effect = APIError(
            message="Service unavailable",
            request=Mock(),
            body=None
        )
        mock_groq_class.return_value = mock_client

        client = LLMClient(api_key="test_key")

        with pytest.raises(LLMClientError) as exc_info:
            client.generate(
                model="llama-3.1-8b-instant",
                prompt="Test prompt"
            )

        error = exc_info.value.error
        assert error.code == "API_ERROR"
        assert "Groq API error" in error.message
