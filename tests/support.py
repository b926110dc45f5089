from pathlib import Path

QUERYOVER_POST = """---
layout: post
title: "Using QueryOver with NHibernate 3"
date: 2011-07-27 21:39
comments: true
categories: [NHibernate, QueryOver]
wordpress_id: 341
---

QueryOver is the strongly typed query API that ships with NHibernate 3.

<!-- more -->

{% include queryover-series.html %}

```csharp
var orders = session.QueryOver<Order>()
    .Where(o => o.Total > 100)
    .List();
```
"""

JQUERY_POST = """---
layout: post
title: A tiny jQuery plugin for placeholders
date: 2012-03-02 08:15
comments: false
category: jQuery
tags: javascript
---

Older browsers do not support the placeholder attribute.
"""

RETRO_POST = """---
layout: post
title: Looking back at 2012
date: 2013-01-05 19:00:00 +0100
comments: true
categories:
- Retrospective
---

Another year of blogging.
"""


def write_post(folder, name, text) -> Path:
    path = Path(folder) / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def write_sample_blog(folder):
    """Three well-formed posts, one per era of the blog."""
    return [
        write_post(folder, "2011-07-27-using-queryover.markdown", QUERYOVER_POST),
        write_post(folder, "2012-03-02-jquery-placeholder.md", JQUERY_POST),
        write_post(folder, "2013-01-05-looking-back-at-2012.markdown", RETRO_POST),
    ]
