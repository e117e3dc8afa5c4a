"""Core configuration, persistence and cross-cutting concerns"""
