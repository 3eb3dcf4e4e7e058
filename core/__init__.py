"""core/ -- Kernel: configuration shared by auth/ and authlog/. Imports nothing from either."""
