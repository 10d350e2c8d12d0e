"""Identity lifecycle and certificate authority access"""
