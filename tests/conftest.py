import os
import sys

import logfire
import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from config import AppConfig
from models.session_models import TranslationContext

logfire.configure(send_to_logfire=False, console=False)

JOHN_3_16 = "For God so loved the world that he gave his one and only Son"


@pytest.fixture
def app_config():
    return AppConfig(
        _env_file=None,
        GEMINI_API_KEY="test-key",
        summary_cache_enabled=False,
        max_rounds=3,
        practice_mode="practice",
    )


@pytest.fixture
def john_verse():
    return JOHN_3_16


@pytest.fixture
def multi_language_context():
    return TranslationContext(
        is_translated=True,
        original_verse=JOHN_3_16,
        translated_verse="Porque Dios amó tanto al mundo que dio a su único Hijo",
        multi_language_translations={
            'es': 'Porque Dios amó tanto al mundo que dio a su único Hijo',
            'fr': "Car Dieu a tant aimé le monde qu'il a donné son Fils unique",
            'de': 'Denn so hat Gott die Welt geliebt dass er seinen eingeborenen Sohn gab',
            'zh-cn': '神爱世人 甚至将他的独生子赐给他们',
            'ko': '하나님이 세상을 이처럼 사랑하사 독생자를 주셨으니',
            'th': 'เพราะพระเจ้าทรงรักโลกมากจนทรงประทานพระบุตรองค์เดียวของพระองค์',
        },
    )
