import os
import pytest

# Settings are read at import time, so the environment is prepared before any test module loads
os.environ.setdefault('FLASK_ENV', 'testing')
os.environ.setdefault('GEMINI_API_KEY', 'test-gemini-key')
os.environ.setdefault('NX_DEFAULT_PROVIDER', 'gemini')


@pytest.fixture(scope='module')
def app():
    """Create and configure a new app instance for each test module."""
    from app import create_app
    app = create_app()
    app.config.update({
        "TESTING": True,
    })
    yield app


@pytest.fixture(scope='module')
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def quiz_payload():
    """A well-formed quiz as a model would return it."""
    return {
        "title": "Customer Support Basics",
        "questions": [
            {
                "question": "What should an agent do first?",
                "options": ["Greet the customer", "Close the ticket", "Escalate", "Ignore"],
                "correctAnswer": "Greet the customer",
                "explanation": "A greeting opens every conversation.",
            },
            {
                "question": "When is a ticket escalated?",
                "options": ["Never", "When the agent cannot resolve it"],
                "correctAnswer": "When the agent cannot resolve it",
            },
        ],
    }
