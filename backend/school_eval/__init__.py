"""School self-evaluation tracker backend"""
