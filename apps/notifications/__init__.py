"""Notifications app package.

Keeps the append-only feed of booking lifecycle events and fans each
committed event out to subscribers. Delivery (push, email, in-app) is done
by external dispatchers that subscribe on the message bus or read the feed.
"""
