from fedimg.cli import main

raise SystemExit(main())
