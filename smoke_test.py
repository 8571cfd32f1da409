#!/usr/bin/env python
"""
Manual smoke script for a running proxy.

Usage:
    python smoke_test.py [base_url] [jira_user_email]
"""
import sys

import requests

BACKEND_URL = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:3001"
JIRA_USER = sys.argv[2] if len(sys.argv) > 2 else None


def check_health():
    print("=== Health ===")
    response = requests.get(f"{BACKEND_URL}/health", timeout=10)
    data = response.json()
    print(f"Status: {data['status']}")
    print(f"Gemini configured: {data['services']['gemini']['configured']}")
    print(f"Jira configured: {data['services']['jira']['configured']}")
    print(f"Live sessions: {data['sessions']['active_sessions']}")
    print()


def check_chat():
    print("=== Chat session ===")
    session_id = None
    turns = [
        "My name is Ada. Remember it.",
        "What is my name?",
    ]

    for message in turns:
        payload = {"message": message}
        if session_id:
            payload["sessionId"] = session_id
        else:
            payload["systemInstruction"] = "Answer in one short sentence."

        print(f"\n> {message}")
        response = requests.post(f"{BACKEND_URL}/api/chat", json=payload, timeout=120)
        if response.status_code != 200:
            print(f"Error {response.status_code}: {response.text}")
            return

        data = response.json()
        session_id = data["sessionId"]
        print(f"< {data['reply']}")
        print(f"  session: {session_id}")

    response = requests.post(f"{BACKEND_URL}/api/chat/end", json={"sessionId": session_id}, timeout=10)
    print(f"\nEnded session: {response.json()}")


def check_jira():
    print("=== Jira ===")
    response = requests.get(
        f"{BACKEND_URL}/api/jira/issues",
        headers={"X-User-Email": JIRA_USER},
        timeout=30
    )
    print(f"Status: {response.status_code}")
    if response.status_code != 200:
        print(response.text)
        return

    issues = response.json()["issues"]
    for issue in issues[:10]:
        print(f"  {issue['key']:12} [{issue['status']}] {issue['summary']}")

    if issues:
        key = issues[0]["key"]
        detail = requests.get(f"{BACKEND_URL}/api/jira/issue", params={"key": key}, timeout=30).json()
        print(f"\n{detail['key']}: {detail['description'][:200]}")


if __name__ == "__main__":
    try:
        check_health()
        check_chat()
        if JIRA_USER:
            print()
            check_jira()
        print("\n=== Smoke run completed ===")
    except requests.RequestException as e:
        print(f"Error: {e}")
