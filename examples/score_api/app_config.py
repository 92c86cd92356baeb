from cognito_verification import (
    AuthExtension,
    CognitoAuthenticator,
    CognitoSettings,
    configure_logging,
)

configure_logging()

# COGNITO_USER_POOL_ID / COGNITO_APP_CLIENT_ID / COGNITO_REGION from env or .env
settings = CognitoSettings.from_env()

# one authenticator per process; the key set cache inside it is shared by all requests
authenticator = CognitoAuthenticator.from_settings(settings)

# auth will be the ext imported in the Flask app
auth = AuthExtension(authenticator)
