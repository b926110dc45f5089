import sys

from blog_posts.main import main

sys.exit(main())
