class BotError(Exception):
    pass

class ConfigError(BotError):
    pass

class CredentialInputError(BotError):
    pass

class AuthError(BotError):
    pass

class DiscoveryError(BotError):
    pass

class BumpError(BotError):
    pass
