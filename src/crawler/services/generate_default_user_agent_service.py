import platform

from accessiscan.core.managers.config_manager import config_manager


def generate_default_user_agent() -> str:
    """
    Builds the scanner's User-Agent from the product name and version in
    settings.json plus the operating system, e.g.
    'AccessiScan/1.0 (X11; Linux x86_64; Web Accessibility Checker)'.
    """
    os_name = platform.system()

    if os_name == "Windows":
        os_part = "Windows NT 10.0; Win64; x64"
    elif os_name == "Darwin":  # macOS
        os_part = "Macintosh; Intel Mac OS X 10_15_7"
    elif os_name == "Linux":
        os_part = "X11; Linux x86_64"
    else:
        os_part = "Unknown OS"

    product = config_manager.get_nested("user_agent.product", "AccessiScan")
    version = config_manager.get_nested("user_agent.version", "1.0")

    return f"{product}/{version} ({os_part}; Web Accessibility Checker)"
