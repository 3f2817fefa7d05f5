"""HomeVoice — voice command core for a smart-home controller."""

from homevoice.config import __version__, AppConfig
