"""Chat service - weather-aware prompts with a local fallback."""
import logging
import textwrap
from typing import Optional
from chat_provider import ChatProviderBase
from chat_data import ChatSuccess
from chat_fallback import fallback_response, round_half_up
from weather_data import WeatherSnapshot

PERSONA = textwrap.dedent(
    """\
    You are a friendly and knowledgeable weather assistant. You help users understand weather conditions, provide weather-related advice, and engage in pleasant conversation.

    Your personality:
    - Friendly, helpful, and enthusiastic about weather
    - Use weather emojis appropriately
    - Provide practical advice about weather conditions
    - Keep responses concise but informative
    - Be conversational and engaging

    Guidelines:
    - If asked about current weather, use the provided weather data
    - Provide weather-related tips and advice when relevant
    - If the user asks non-weather questions, still be helpful but gently guide back to weather topics
    - Use emojis to make responses more engaging
    - Keep responses under 150 words typically"""
)

_CONTEXT_TEMPLATE = textwrap.dedent(
    """\


    Current weather context:
    - Location: {location}
    - Temperature: {temp}°C
    - Condition: {condition}
    - Description: {description}
    - Humidity: {humidity:g}%
    - Wind Speed: {wind:g} m/s
    - Feels like: {feels_like}°C"""
)


def build_system_prompt(snapshot: Optional[WeatherSnapshot]) -> str:
    """Return the persona, followed by the weather context when a snapshot is known."""
    prompt = PERSONA
    if snapshot is not None:
        prompt += _CONTEXT_TEMPLATE.format(
            location=snapshot.location_label,
            temp=round_half_up(snapshot.temp),
            condition=snapshot.condition_main,
            description=snapshot.condition_description,
            humidity=snapshot.humidity,
            wind=snapshot.wind_speed,
            feels_like=round_half_up(snapshot.feels_like),
        )
    return prompt


def build_prompt(message: str, snapshot: Optional[WeatherSnapshot]) -> str:
    return f"{build_system_prompt(snapshot)}\n\nUser: {message}"


class ChatService:
    """
    Answers chat messages through a language-model provider.

    When the provider reports a failure the reply is computed locally by
    chat_fallback, so converse() always returns text.
    """

    def __init__(self, provider: ChatProviderBase):
        self.provider = provider

    def converse(self, message: str, snapshot: Optional[WeatherSnapshot]) -> str:
        """
        Reply to a user message.

        Args:
            message: The user's chat message
            snapshot: Latest weather snapshot, if any

        Returns:
            Model reply, or the local fallback reply
        """
        result = self.provider.complete(build_prompt(message, snapshot))
        if isinstance(result, ChatSuccess):
            logging.info(f"Chat reply received ({len(result.text)} chars)")
            return result.text

        logging.warning(f"Chat provider failed, using fallback reply: {result.reason}")
        return fallback_response(message, snapshot)
