# SPDX-License-Identifier: MIT

from stronghabit.model.habit import CompletionLog


def sort_logs_descending(logs: list[CompletionLog]) -> list[CompletionLog]:
    return sorted(logs, key=lambda log: log["date"], reverse=True)


def calculate_streak(logs: list[CompletionLog]) -> int:
    """
    Count consecutive completed days ending at the most recent log.

    The most recent log must itself be completed, otherwise the streak is
    broken. Logs are sorted here, so callers may append them in any order.
    """
    if len(logs) == 0:
        return 0

    sorted_logs = sort_logs_descending(logs)
    most_recent = sorted_logs[0]
    if not most_recent["completed"]:
        return 0

    streak = 1
    anchor = most_recent["date"]
    for log in sorted_logs[1:]:
        if log["date"] == anchor.subtract(days=1) and log["completed"]:
            streak += 1
            anchor = log["date"]
        else:
            break

    return streak


def longest_completed_run(logs: list[CompletionLog]) -> int:
    """Length of the longest run of consecutive completed days anywhere in the logs."""
    completed_days = sorted({log["date"] for log in logs if log["completed"]})

    longest = 0
    current = 0
    previous = None
    for day in completed_days:
        if previous is not None and day == previous.add(days=1):
            current += 1
        else:
            current = 1
        longest = max(longest, current)
        previous = day

    return longest
