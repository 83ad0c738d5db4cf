import sys
from pathlib import Path
sys.path.append(str(Path(__file__).parent.parent))

from classmetrics.cli import classify_main

def main():
    sys.exit(classify_main())

if __name__=='__main__':
    main()
