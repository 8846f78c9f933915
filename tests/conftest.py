import os
import sys

# Keep the suite independent of whatever MYFT_* variables the shell exports
for _key in [k for k in os.environ if k.startswith(("MYFT_", "FT_TOOL_"))]:
    del os.environ[_key]

# Add src directory to Python path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), "src"))
