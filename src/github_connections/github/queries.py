from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Tuple

PROFILE_FIELDS = """
    login
    name
    followers {
        totalCount
    }
    following {
        totalCount
    }
"""

FOLLOWING_QUERY = """
query($login: String!, $first: Int!, $after: String) {
    user(login: $login) {
        following(first: $first, after: $after) {
            nodes {
                login
                name
            }
            pageInfo {
                endCursor
                hasNextPage
            }
        }
    }
}
"""

def profile_alias(index: int) -> str:
    return f"user{index}"


def build_profiles_query(usernames: Sequence[str]) -> Tuple[str, Dict[str, Any]]:
    """Build one query resolving several users, binding each login as a variable."""
    if not usernames:
        raise ValueError("at least one username is required")

    declarations = []
    selections = []
    variables: Dict[str, Any] = {}
    for index, username in enumerate(usernames):
        variable = f"login{index}"
        declarations.append(f"${variable}: String!")
        selections.append(f"{profile_alias(index)}: user(login: ${variable}) {{{PROFILE_FIELDS}}}")
        variables[variable] = username

    query = f"query({', '.join(declarations)}) {{\n" + "\n".join(selections) + "\n}"
    return query, variables


def following_variables(username: str, page_size: int, cursor: Optional[str]) -> Dict[str, Any]:
    return {"login": username, "first": page_size, "after": cursor}


__all__ = [
    "FOLLOWING_QUERY",
    "build_profiles_query",
    "following_variables",
    "profile_alias",
]
