"""
Default settings for terracmd.

These are the default values used when neither the environment nor the
user's settings file provides one.
"""

DEFAULT_SETTINGS = {
    "version": "1.0.0",

    # Remote API
    "api": {
        "base_url": "https://app.terraform.io/api/v2",
        "content_type": "application/vnd.api+json",
        "timeout": 30,
    },

    # Defaults applied when a call omits them
    "organization": "",
    "vcs": {
        "organization": "",
        "project": "",
    },

    # Terraform binary used by the state importer
    "terraform_binary": "terraform",
}

# Path of the v2 API, appended when TFC_ADDRESS is a bare host
API_PATH = "/api/v2"

# Environment variables consulted by ApiSettings.from_environment()
ENV_TOKEN = "TFC_TOKEN"
ENV_ADDRESS = "TFC_ADDRESS"  # host ("https://tfe.example.com") or full API root
ENV_ORGANIZATION = "TFC_ORGANIZATION"
ENV_VCS_ORGANIZATION = "TFC_VCS_ORGANIZATION"
ENV_VCS_PROJECT = "TFC_VCS_PROJECT"
