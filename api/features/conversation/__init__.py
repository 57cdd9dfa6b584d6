"""Conversation feature package: DTOs, controller, router, repository and service.

A conversation is a thread of user/assistant turns exchanged with the content
generation webhook. Each turn is written in a single transaction together with
the webhook call that produced it.
"""
