from domain_lb.models import StepStatus


# ANSI color codes
class Colors:
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    BLUE = "\033[94m"
    BOLD = "\033[1m"
    END = "\033[0m"


def colored(text: str, color: str) -> str:
    """Return colored text."""
    return f"{color}{text}{Colors.END}"


def status_icon(status: StepStatus) -> str:
    """Return colored status with icon."""
    if status == StepStatus.CREATED:
        return colored("CREATED ✓", Colors.GREEN)
    elif status == StepStatus.FOUND:
        return colored("FOUND ✓", Colors.GREEN)
    elif status == StepStatus.UPDATED:
        return colored("UPDATED ✓", Colors.GREEN)
    elif status == StepStatus.SKIPPED:
        return colored("SKIPPED", Colors.YELLOW)
    return str(status.value)


def warn(message: str) -> None:
    print(colored(f"⚠️  {message}", Colors.YELLOW))


def error(message: str) -> None:
    print(colored(f"❌  {message}", Colors.RED))
