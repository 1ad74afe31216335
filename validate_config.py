"""
Startup Configuration Validator
Checks the AI provider configuration before the app starts and prints helpful messages
"""
import os
import sys
from dotenv import load_dotenv

load_dotenv()

PLACEHOLDER_MARKERS = ['your_', 'example', 'here', 'change-this']
SUPPORTED_PROVIDERS = ('gemini', 'openai')


def _is_placeholder(value: str) -> bool:
    return any(marker in value.lower() for marker in PLACEHOLDER_MARKERS)


def validate_configuration():
    """Validate all critical configuration and return (errors, warnings)."""
    errors = []
    warnings = []

    provider = os.getenv('NX_DEFAULT_PROVIDER', 'gemini').lower()
    openai_key = os.getenv('OPENAI_API_KEY', '')
    gemini_key = os.getenv('GEMINI_API_KEY', '')

    if provider not in SUPPORTED_PROVIDERS:
        errors.append(
            f"❌ NX_DEFAULT_PROVIDER='{provider}' is not supported!\n"
            f"   Use one of: {', '.join(SUPPORTED_PROVIDERS)}"
        )

    if provider == 'gemini' and not gemini_key:
        errors.append(
            "❌ GEMINI_API_KEY is missing!\n"
            "   The default provider is Gemini. Add GEMINI_API_KEY to .env\n"
            "   (get one from https://aistudio.google.com/app/apikey)"
        )
    if provider == 'openai' and not openai_key:
        errors.append(
            "❌ OPENAI_API_KEY is missing!\n"
            "   NX_DEFAULT_PROVIDER=openai needs OPENAI_API_KEY in .env\n"
            "   (get one from https://platform.openai.com/api-keys)"
        )

    if openai_key and _is_placeholder(openai_key):
        errors.append(
            "❌ OPENAI_API_KEY contains placeholder value!\n"
            "   Replace with actual API key from https://platform.openai.com/api-keys"
        )

    if gemini_key and _is_placeholder(gemini_key):
        errors.append(
            "❌ GEMINI_API_KEY contains placeholder value!\n"
            "   Replace with actual API key from https://aistudio.google.com/app/apikey"
        )

    extractor = os.getenv('NX_PDF_EXTRACTOR', 'ai').lower()
    if extractor not in ('ai', 'local'):
        errors.append(
            f"❌ NX_PDF_EXTRACTOR='{extractor}' is not supported!\n"
            "   Use 'ai' (Gemini reads the PDF) or 'local' (PyPDF2)"
        )
    elif extractor == 'ai' and provider == 'openai':
        warnings.append(
            "⚠️  NX_PDF_EXTRACTOR=ai has no effect with the OpenAI provider\n"
            "   PDFs will be parsed locally with PyPDF2"
        )

    if os.getenv('FLASK_ENV', 'production') == 'production' and os.getenv('DEBUG', '').lower() in ('1', 'true', 'yes'):
        errors.append(
            "❌ DEBUG is enabled in production!\n"
            "   Set DEBUG=false or FLASK_ENV=development"
        )

    if os.getenv('NX_CORS_ORIGINS', '*') == '*':
        warnings.append(
            "⚠️  NX_CORS_ORIGINS allows every origin\n"
            "   Set it to your site's origin, e.g. https://nexus.example.com"
        )

    return errors, warnings


def print_validation_results():
    """Print validation results and return False if critical errors were found."""
    print("=" * 70)
    print("Nexus Configuration Validation")
    print("=" * 70)
    print()

    errors, warnings = validate_configuration()

    if warnings:
        print("WARNINGS:")
        print("-" * 70)
        for warning in warnings:
            print(warning)
            print()

    if errors:
        print("CRITICAL ERRORS:")
        print("-" * 70)
        for error in errors:
            print(error)
            print()

        print("=" * 70)
        print("❌ Configuration validation FAILED!")
        print("=" * 70)
        print()
        print("Fix the errors above and restart the application.")
        print()
        return False

    print("=" * 70)
    if warnings:
        print("⚠️  Configuration validation completed with WARNINGS")
    else:
        print("✅ Configuration validation PASSED!")
    print("=" * 70)
    print()
    return True


if __name__ == '__main__':
    success = print_validation_results()
    sys.exit(0 if success else 1)
