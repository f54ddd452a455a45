from onboarding.core.mnemonic.codec import DEFAULT_LANGUAGE, decode, encode, generate, get_wordlist, supported_languages

__all__ = ["DEFAULT_LANGUAGE", "decode", "encode", "generate", "get_wordlist", "supported_languages"]
