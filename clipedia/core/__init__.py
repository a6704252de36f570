"""Core capture, classification and storage components"""
