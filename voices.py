# voices.py
from enum import Enum


class VoiceCharacter(str, Enum):
    DEFAULT = "default"
    DRILL_SERGEANT = "drill-sergeant"
    ROBOT = "robot"
    BRITISH_BUTLER = "british-butler"
    MOM = "mom"
    CONFIDENT_LEADER = "confident-leader"

    @classmethod
    def parse(cls, value):
        try:
            return cls(value)
        except ValueError:
            return cls.DEFAULT


# rate / pitch for client-side speech synthesis, plus a voice category hint
VOICE_SETTINGS = {
    VoiceCharacter.DEFAULT: {"rate": 1.0, "pitch": 1.0, "voice": "neutral"},
    VoiceCharacter.DRILL_SERGEANT: {"rate": 1.2, "pitch": 0.8, "voice": "male"},
    VoiceCharacter.ROBOT: {"rate": 0.8, "pitch": 0.6, "voice": "synthetic"},
    VoiceCharacter.BRITISH_BUTLER: {"rate": 0.9, "pitch": 1.1, "voice": "british"},
    VoiceCharacter.MOM: {"rate": 1.0, "pitch": 1.2, "voice": "female"},
    VoiceCharacter.CONFIDENT_LEADER: {"rate": 1.1, "pitch": 0.9, "voice": "male"},
}

VOICE_CATALOG = [
    {"id": "default", "name": "Scarlett", "personality": "Professional and clear",
     "testMessage": "This is Scarlett, your professional reminder voice."},
    {"id": "drill-sergeant", "name": "Dan (Drill Sergeant)", "personality": "Tough, no-nonsense military style",
     "testMessage": "Listen up! Time to get moving and complete your mission!"},
    {"id": "robot", "name": "Will (AI Assistant)", "personality": "Robotic, systematic approach",
     "testMessage": "System notification: Your productivity levels require immediate attention."},
    {"id": "british-butler", "name": "Gerald (British Butler)", "personality": "Polite but passive-aggressive",
     "testMessage": "I do beg your pardon, but perhaps it's time you attended to your responsibilities."},
    {"id": "mom", "name": "Jane (Disappointed Mom)", "personality": "Guilt-inducing maternal energy",
     "testMessage": "I'm not angry, I'm just disappointed. You know how much this means to me."},
    {"id": "confident-leader", "name": "Will (Confident Leader)", "personality": "Executive leadership style",
     "testMessage": "Let's execute this plan efficiently and deliver results."},
]


def voice_settings(character):
    return dict(VOICE_SETTINGS[VoiceCharacter.parse(character)])


def speech_payload(text, character):
    persona = VoiceCharacter.parse(character)
    return {
        "speechData": {"text": text, "character": persona.value},
        "voiceSettings": voice_settings(persona),
    }
