"""Dev server launcher."""


def main() -> None:
    """Run the reCAPTCHA validation service with uvicorn."""
    from recaptcha_validator.main import run

    run()


if __name__ == "__main__":
    main()
